"""Current version of OwnTime; also the constants shared by the pipeline."""

owntime_version = "0.3.0"
owntime_date = "2026.10.19"

# Address value that ends one backtrace in the raw sample buffer.
SENTINEL_ADDRESS = 0

# Position of the innermost (currently executing) frame in a backtrace.
# Samplers record from the leaf outward, so the leaf comes first.
LEAF_FRAME_INDEX = 0

# Number of addresses (sentinels included) a sampler buffer holds by default.
DEFAULT_BUFFER_CAPACITY = 1_000_000

# Mean seconds between samples for the Python sampler.
DEFAULT_SAMPLING_INTERVAL = 0.001
