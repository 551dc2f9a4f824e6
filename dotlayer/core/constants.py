"""
Project constants definitions
"""

# ============================================================
# Repository Layout
# ============================================================

FILES_DIR = "files"
HOOKS_DIR = "hooks"
HOSTS_DIR = "hosts"
TAGS_DIR = "tags"

SETTINGS_FILE = "settings.toml"

# ============================================================
# Hook Phases
# ============================================================

PHASE_PRE_UP = "pre-up"
PHASE_POST_UP = "post-up"
PHASE_PRE_DOWN = "pre-down"
PHASE_POST_DOWN = "post-down"

# ============================================================
# Default Values
# ============================================================

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_TARGET_DIR = "~"

# ============================================================
# Environment
# ============================================================

ENV_PREFIX = "DOTLAYER_"
ENV_REPO_DIR = ENV_PREFIX + "DIR"
ENV_TARGET_DIR = ENV_PREFIX + "TARGET"
ENV_HOSTNAME = ENV_PREFIX + "HOSTNAME"
ENV_TAGS = ENV_PREFIX + "TAGS"
