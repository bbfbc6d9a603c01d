__version__ = "0.2.0"

from .cli import main as main_app
from .process import SubprocessSpec, run
from .config import load_config

__all__ = ["main_app", "SubprocessSpec", "run", "load_config", "__version__"]
