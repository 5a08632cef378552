"""User configuration model."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class SxConfig:
    """Settings stored in `~/.sx/config.toml`.

    Attributes:
        enabled_clients: Client IDs to install into. Empty means every
            detected client.
        bootstrap: Bootstrap option key -> whether the user enabled it.
            Options without an entry use their default.
    """

    enabled_clients: tuple[str, ...] = ()
    bootstrap: Mapping[str, bool] = field(default_factory=dict)

    def with_enabled_clients(self, client_ids: tuple[str, ...]) -> "SxConfig":
        return replace(self, enabled_clients=client_ids)

    def with_bootstrap_choices(self, choices: Mapping[str, bool]) -> "SxConfig":
        merged = dict(self.bootstrap)
        merged.update(choices)
        return replace(self, bootstrap=merged)
