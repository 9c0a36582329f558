from .main import main_routes_bp
from .files import files_bp

__all__ = ["main_routes_bp", "files_bp"]
