"""AppSec Gym — hands-on training for fixing vulnerable code."""

__version__ = "0.1.0"
__logo__ = "🏋️"
