"""Status overlay text for the viewer."""
from domain.temporal_filtering import TemporalFilteringType
from domain.viewer_settings import ViewerSettings


def format_status_lines(settings: ViewerSettings, framerate: float) -> list[str]:
    """
    Build the overlay entries, one per line, in display order.

    Args:
        settings: Current viewer settings
        framerate: Grabber frame rate estimate

    Returns:
        List of overlay strings
    """
    temporal = f"temporal filtering: {settings.temporal_filtering}"
    if settings.temporal_filtering != TemporalFilteringType.NONE:
        temporal += f", window size {settings.window_size}"

    if settings.bilateral_enabled:
        bilateral = (
            f"spatial sigma {settings.bilateral_sigma_s:.0f}, "
            f"range sigma {settings.bilateral_sigma_r:.2f}"
        )
    else:
        bilateral = "off"

    return [
        f"framerate: {framerate:.1f}",
        f"confidence threshold: {settings.confidence_threshold}",
        temporal,
        f"bilateral filtering: {bilateral}",
        f"save stream: {'on' if settings.recording else 'off'}",
    ]
