"""Starter .enginetags.toml template."""

DEFAULT_TOML = """\
# enginetags configuration
version = "1.0"

[scan]
platform = "windows"        # depots restricted to other platforms are skipped
dump_raw_info = true

[rules]
path = "rules.ini"
# corpus = "rules/tests"    # filelists/ and types/ test corpus for `enginetags verify`

[pool]
refresh_interval = 5.0      # seconds between server directory refreshes
rate_limit_backoff = 60.0   # seconds to wait after the directory throttles us
# eligible_types = ["SteamCache", "CDN"]

[session]
max_reconnect_attempts = 10
reconnect_delay = 1.0       # attempt N waits N * reconnect_delay seconds

[cache]
manifests_dir = "manifests"
raw_info_dir = "info"

[output]
path = "detected.json"
format = "terminal"         # terminal | json
"""
