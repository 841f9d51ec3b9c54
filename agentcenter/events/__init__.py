from .bus import CallbackObserver, Observer, ObserverBus

__all__ = ["CallbackObserver", "Observer", "ObserverBus"]
