# SPDX-License-Identifier: GPL-3.0-or-later
# Application constants

"""Application-wide constants and configuration values."""

# Application identifier
APP_ID = "io.github.nvidiamonitor.NvidiaMonitor"

# Application metadata
APP_NAME = "NVIDIA Monitor"
APP_VERSION = "0.3.0"
APP_WEBSITE = "https://github.com/nvidiamonitor/nvidia-monitor"
APP_ISSUE_URL = "https://github.com/nvidiamonitor/nvidia-monitor/issues"

# Directory name under the user's config directory
APP_DIR_NAME = "nvidia-monitor"

# Default refresh rate in seconds
DEFAULT_REFRESH_RATE = 5

# CSS styles for the application
APP_CSS = """
.gpu-page {
    padding: 12px 18px;
}

.metric-title {
    font-weight: bold;
}

.metric-value {
    font-feature-settings: "tnum";
}

.metric-value.unavailable {
    opacity: 0.55;
}
"""
