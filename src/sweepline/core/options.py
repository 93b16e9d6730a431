"""
Validated options shared by all intersection finders.
"""

from typing import Any, Dict, Optional, Union

from .errors import ConfigurationError
from .kernel import KERNELS, PredicateKernel, get_kernel

DEGENERATE_POLICIES = ('ignore', 'raise')


class SweepOptions:
    """
    Options controlling what a finder reports and how it computes.

    Attributes:
        include_endpoint_touches (bool): Report shared endpoints, T-junctions
            and point segments lying on segments (default: False)
        kernel: Kernel name ('exact', 'arbitrary', 'float') or a
            PredicateKernel instance (default: 'exact')
        allow_overlaps (bool): Accept collinear overlapping segments; when
            False their presence is a ConfigurationError (default: True)
        on_degenerate (str): 'ignore' drops zero-length segments, 'raise'
            rejects them, when touches are excluded (default: 'ignore')
        precision (int): Digits of the 'arbitrary' kernel (default: 50)
    """

    def __init__(self, include_endpoint_touches: bool = False,
                 kernel: Union[str, PredicateKernel] = 'exact',
                 allow_overlaps: bool = True,
                 on_degenerate: str = 'ignore',
                 precision: int = 50):
        if not isinstance(kernel, PredicateKernel) and kernel not in KERNELS:
            raise ConfigurationError(
                f"Unknown kernel {kernel!r}. Available kernels: {', '.join(KERNELS)}"
            )
        if on_degenerate not in DEGENERATE_POLICIES:
            raise ConfigurationError(
                f"on_degenerate must be one of {DEGENERATE_POLICIES}, got {on_degenerate!r}"
            )
        if isinstance(precision, bool) or not isinstance(precision, int) or precision < 1:
            raise ConfigurationError(
                f"precision must be a positive integer, got {precision!r}"
            )

        self.include_endpoint_touches = bool(include_endpoint_touches)
        self.kernel = kernel
        self.allow_overlaps = bool(allow_overlaps)
        self.on_degenerate = on_degenerate
        self.precision = precision

    def make_kernel(self) -> PredicateKernel:
        return get_kernel(self.kernel, precision=self.precision)

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> 'SweepOptions':
        """
        Build options from a configuration dictionary.

        Keys may be written with hyphens or underscores; unknown keys are
        rejected.

        Args:
            config: The `sweep` section of a YAML configuration

        Example:
            >>> SweepOptions.from_config({'kernel': 'float', 'include-endpoint-touches': True})
            SweepOptions(include_endpoint_touches=True, kernel='float', allow_overlaps=True, on_degenerate='ignore', precision=50)
        """
        config = config or {}
        known = cls().as_dict()
        kwargs = {}
        for key, value in config.items():
            name = str(key).replace('-', '_')
            if name not in known:
                raise ConfigurationError(
                    f"Unknown sweep option {key!r}. Valid options: {', '.join(known)}"
                )
            kwargs[name] = value
        return cls(**kwargs)

    def as_dict(self) -> Dict[str, Any]:
        return {
            'include_endpoint_touches': self.include_endpoint_touches,
            'kernel': self.kernel if isinstance(self.kernel, str) else self.kernel.name,
            'allow_overlaps': self.allow_overlaps,
            'on_degenerate': self.on_degenerate,
            'precision': self.precision,
        }

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, SweepOptions) and self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        fields = ', '.join(f"{key}={value!r}" for key, value in self.as_dict().items())
        return f"SweepOptions({fields})"
