import argparse

from owntime.owntime_config import (
    DEFAULT_BUFFER_CAPACITY,
    DEFAULT_SAMPLING_INTERVAL,
)


class OwnTimeArguments(argparse.Namespace):
    """Encapsulates all settings and default values for OwnTime."""

    def __init__(self) -> None:
        super().__init__()
        # warn when the sample buffer filled up (samples may be missing)
        self.warn_on_full_buffer = True
        # entries below this percentage of samples are not reported
        self.percent_threshold = 1
        self.column_width = 132
        # mean seconds between samples
        self.sampling_interval = DEFAULT_SAMPLING_INTERVAL
        # maximum number of addresses, sentinels included, in the sample buffer
        self.buffer_capacity = DEFAULT_BUFFER_CAPACITY
