from __future__ import annotations

# Local metadata queries (cargo pkgid, git config, ssh-add)
LOCAL_TIMEOUT_SECONDS = 60.0

# cargo login talks to nothing but the local credentials file
LOGIN_TIMEOUT_SECONDS = 60.0

# apt-get update/install
SYSTEM_INSTALL_TIMEOUT_SECONDS = 10 * 60.0

# cargo-release archive download
DOWNLOAD_TIMEOUT_SECONDS = 2 * 60.0
