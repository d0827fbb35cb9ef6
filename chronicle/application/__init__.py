from .application import Application, ApplicationBuilder, HasLifecycle

__all__ = [
    "Application",
    "ApplicationBuilder",
    "HasLifecycle",
]
