# pricewatch/config/constants.py
from pricewatch.config.spec import ConfigSpec, split_list

CONFIG_SPECS = {
    'dry_run': ConfigSpec(
        type=bool,
        default=False,
        description="Log notifications instead of sending them"
    ),
    'poll_interval_seconds': ConfigSpec(
        type=float,
        default=10.0,
        validator=lambda x: 1 <= x <= 3600,
        description="Pause between two samples of a watched symbol (s)"
    ),
    'averaging_window_minutes': ConfigSpec(
        type=float,
        default=5.0,
        validator=lambda x: 0 < x <= 24 * 60,
        description="Moving average window (min)"
    ),
    'deviation_threshold_pct': ConfigSpec(
        type=float,
        default=0.42,
        validator=lambda x: 0 < x <= 100,
        description="Deviation from the moving average that triggers a notification (%)"
    ),
    'rearm_threshold_pct': ConfigSpec(
        type=float,
        default=0.1,
        validator=lambda x: 0 <= x <= 100,
        description="Band around the last alerted price that suppresses repeats (%)"
    ),
    'sweep_interval_seconds': ConfigSpec(
        type=float,
        default=30.0,
        validator=lambda x: 1 <= x <= 3600,
        description="Pause between two target alert sweeps (s)"
    ),
    'fetch_timeout_seconds': ConfigSpec(
        type=float,
        default=10.0,
        validator=lambda x: 0 < x <= 120,
        description="Upper bound for a single price fetch (s)"
    ),
    'watched_symbols': ConfigSpec(
        type=str,
        default="LKOH",
        validator=lambda x: len(split_list(x)) > 0,
        description="Comma separated tickers watched for deviations"
    ),
    'deviation_chat_ids': ConfigSpec(
        type=str,
        default="",
        validator=lambda x: all(item.lstrip("-").isdigit() for item in split_list(x)),
        description="Comma separated chat ids receiving deviation notifications"
    ),
}
