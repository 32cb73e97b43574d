"""Shared constants for the migration pipeline.

Package names, symbol vocabularies and file conventions used across
the project model and the rewrite passes.
"""

# =============================================================================
# Packages
# =============================================================================

# Legacy umbrella package (Taro 2) and its Taro 3 API package share a name
TARO_PACKAGE = "@tarojs/taro"

# Component runtime that owns the UI base classes in Taro 3
REACT_PACKAGE = "react"

# Default binding used when a fresh runtime import is created
REACT_DEFAULT_BINDING = "React"

# Successor "current instance" accessor exported by @tarojs/taro
CURRENT_INSTANCE_FACTORY = "getCurrentInstance"

# =============================================================================
# UI-layer symbols
# =============================================================================

# Symbols that moved from @tarojs/taro to react. Everything else imported
# from @tarojs/taro stays on the framework API package.
UI_SYMBOLS = frozenset({
    "Component",
    "PureComponent",
    "Fragment",
    "createContext",
    "createRef",
    "forwardRef",
    "memo",
    "useState",
    "useEffect",
    "useLayoutEffect",
    "useReducer",
    "useCallback",
    "useMemo",
    "useRef",
    "useContext",
    "useImperativeHandle",
    "useDebugValue",
    # Type-level aliases
    "FC",
    "FunctionComponent",
    "ComponentClass",
    "ComponentType",
    "PropsWithChildren",
    "SFC",
})

# =============================================================================
# Entry lifecycle
# =============================================================================

LEGACY_MOUNT_HOOK = "componentWillMount"
LAUNCH_HOOK = "onLaunch"

# =============================================================================
# File conventions
# =============================================================================

# Build configuration candidates, relative to the project root
BUILD_CONFIG_CANDIDATES = ("config/index.js", "config/index.ts")

# Entry module basename inside sourceRoot
ENTRY_BASENAME = "app"

# Extensions the passes operate on, in entry-lookup priority order
SOURCE_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx")

# Suffix inserted before the extension of extracted config artifacts
CONFIG_SUFFIX = ".config"

# Build-config field wired to the component framework
FRAMEWORK_FIELD = "framework"
FRAMEWORK_VALUE = "react"
DEFINE_CONSTANTS_FIELD = "defineConstants"
