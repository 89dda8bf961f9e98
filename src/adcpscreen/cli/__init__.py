"""Command-line interface modules for adcpscreen.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from adcpscreen.cli.run_playback import load_user_config_dict, run_playback_pipeline

__all__ = ['load_user_config_dict', 'run_playback_pipeline']
