"""Health analysis and logging tools for the Ovira tracker."""

__all__ = ["analyze_health_risks", "predict_next_period", "calculate_streak", "aggregate_report"]


def analyze_health_risks(*args, **kwargs):
    from .health_analyzer import analyze_health_risks as _impl
    return _impl(*args, **kwargs)


def predict_next_period(*args, **kwargs):
    from .health_analyzer import predict_next_period as _impl
    return _impl(*args, **kwargs)


def calculate_streak(*args, **kwargs):
    from .streak import calculate_streak as _impl
    return _impl(*args, **kwargs)


def aggregate_report(*args, **kwargs):
    from .report import aggregate_report as _impl
    return _impl(*args, **kwargs)
