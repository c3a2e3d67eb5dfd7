from qaweb.config import WebConfig, load_web_config
from qaweb.home import QAWebPaths, ensure_qaweb_layout, resolve_qaweb_home

__version__ = "0.1.0"

__all__ = [
    "QAWebPaths",
    "WebConfig",
    "__version__",
    "ensure_qaweb_layout",
    "load_web_config",
    "resolve_qaweb_home",
]
