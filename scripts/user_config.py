"""adcpscreen user configuration.

This is the user-facing configuration file. Modify settings here to customize
the screening. Expert defaults are in adcpscreen.schemas.param.

Usage:
    python scripts/run_playback_pipeline.py scripts/user_config.py
    python scripts/run_playback_pipeline.py scripts/user_config.py --input other.jsonl
"""

CONFIG = {
    # ========================================================================
    # SOURCE & OUTPUT
    # ========================================================================
    "INPUT_FILE": "data/transect_01.jsonl",  # JSONL ensembles to replay
    "SOURCE": "playback",     # "playback" or "live"
    "PACE_SECONDS": 0,        # Delay between frames (0 = as fast as possible)
    "BASE_DIR": "./output",   # All outputs go here
    "WRITE_CORRECTED": True,  # Write screened ensembles to corrected/

    # ========================================================================
    # SHIP SPEED
    # ========================================================================
    "REMOVE_SHIP_SPEED": True,
    "USE_BT_VEL": True,       # Bottom track as ship velocity
    "USE_GPS_VEL": True,      # GPS speed when bottom track is missing
    "GPS_HEADING_OFFSET": 0.0,

    # ========================================================================
    # SCREENING
    # ========================================================================
    "MARK_BAD_BELOW_BOTTOM": True,
    "FORCE_3BEAM": False,
    "FORCE_BEAM_BAD": 0,      # Beam 0..3
    "FORCE_3BEAM_BT": False,
    "FORCE_BT_BEAM_BAD": 0,

    # ========================================================================
    # RETRANSFORM
    # ========================================================================
    "RETRANSFORM": False,
    "HEADING_SOURCE": "adcp",  # "adcp" or "gps"
    "RETRANSFORM_HEADING_OFFSET": 0.0,
    "WP_CORR_THRESH": 0.25,
    "BT_CORR_THRESH": 0.90,
    "BT_SNR_THRESH": 10.0,

    # ========================================================================
    # REGISTRY & LOGGING
    # ========================================================================
    "EXCLUDE_AVERAGED": True,  # Skip averaged streams
    "LOG_LEVEL": "INFO",
}
