"""Session configuration.

LiveUrlConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

import math
from dataclasses import dataclass

from liveurl.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class LiveUrlConfig:
    """Session configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = LiveUrlConfig(state_key="location", mailbox_size=100)
    """

    # Assigns key the current Url is stored under
    state_key: str = "liveurl"

    # Mailbox — math.inf means unbounded (senders never block)
    mailbox_size: float = math.inf

    # Query decoding limits; pairs past these are dropped, never raised
    max_query_depth: int = 32
    max_query_pairs: int = 1000

    def __post_init__(self) -> None:
        if not self.state_key:
            msg = "LiveUrlConfig.state_key must not be empty."
            raise ConfigurationError(msg)
        size = self.mailbox_size
        if size != math.inf and (isinstance(size, bool) or not isinstance(size, int) or size < 0):
            msg = f"LiveUrlConfig.mailbox_size must be an int >= 0 or math.inf, got {size!r}."
            raise ConfigurationError(msg)
        if self.max_query_depth < 1:
            msg = f"LiveUrlConfig.max_query_depth must be >= 1, got {self.max_query_depth!r}."
            raise ConfigurationError(msg)
        if self.max_query_pairs < 1:
            msg = f"LiveUrlConfig.max_query_pairs must be >= 1, got {self.max_query_pairs!r}."
            raise ConfigurationError(msg)
