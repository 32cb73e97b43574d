"""taroshift: Taro 2 to Taro 3 source migration."""

__version__ = "0.1.0"
