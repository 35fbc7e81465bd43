"""Strategy tag resolution.

Two layers:
1. A base resolver (``detect_from_tag``) backed by a registry of the
   general-purpose strategies.
2. ``StrategySelector``, which checks its own override table first and
   delegates every other tag, unchanged, to the resolver it wraps.
"""

from typing import Callable, Dict, List, Mapping, Optional, Type

from caskfetch.errors import UnknownStrategyError
from caskfetch.strategies.base import FetchStrategy
from caskfetch.strategies.dropbox import DropboxDownloadStrategy
from caskfetch.strategies.no_download import NoDownloadStrategy
from caskfetch.strategies.password_unzip import PasswordUnzipDownloadStrategy
from caskfetch.strategies.plain import CurlDownloadStrategy

Resolver = Callable[[str], Type[FetchStrategy]]


def normalize_tag(tag: str) -> str:
    """Accept both ``no_download`` and ``:no_download`` spellings."""
    return str(tag).strip().lstrip(":")


class StrategyRegistry:
    """Registry of strategy classes keyed by tag.

    Examples:
        >>> registry = StrategyRegistry()
        >>> registry.register(CurlDownloadStrategy)
        >>> registry.get('curl')
        <class 'caskfetch.strategies.plain.CurlDownloadStrategy'>
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._strategies: Dict[str, Type[FetchStrategy]] = {}

    def register(
        self, strategy: Type[FetchStrategy], tag: Optional[str] = None
    ) -> None:
        """Register a strategy class.

        Args:
            strategy: Strategy class to register
            tag: Tag to register under (defaults to ``strategy.tag``)

        Raises:
            ValueError: If the tag is empty or already registered
        """
        tag = normalize_tag(tag or strategy.tag)
        if not tag:
            raise ValueError(f"{strategy.__name__} has no tag to register under.")
        if tag in self._strategies:
            raise ValueError(
                f"Strategy already registered for tag: {tag}. "
                f"Cannot register {strategy.__name__}."
            )
        self._strategies[tag] = strategy

    def get(self, tag: str) -> Type[FetchStrategy]:
        """Get strategy class by tag.

        Raises:
            UnknownStrategyError: If no strategy is registered for the tag
        """
        tag = normalize_tag(tag)
        if tag not in self._strategies:
            available = ", ".join(sorted(self._strategies.keys()))
            raise UnknownStrategyError(
                f"No download strategy for tag: '{tag}'. Available tags: {available}"
            )
        return self._strategies[tag]

    def list_types(self) -> List[str]:
        return list(self._strategies.keys())

    def is_registered(self, tag: str) -> bool:
        return normalize_tag(tag) in self._strategies


# Registry behind the base resolver
_registry = StrategyRegistry()
_registry.register(CurlDownloadStrategy)
_registry.register(CurlDownloadStrategy, tag="nounzip")


def get_registry() -> StrategyRegistry:
    """Get the registry behind the base resolver."""
    return _registry


def register_strategy(
    strategy: Type[FetchStrategy], tag: Optional[str] = None
) -> None:
    """Register a strategy with the base resolver."""
    _registry.register(strategy, tag)


def detect_from_tag(tag: str) -> Type[FetchStrategy]:
    """Base resolver: look a tag up in the global registry.

    Raises:
        UnknownStrategyError: If the tag is not registered
    """
    return _registry.get(tag)


DEFAULT_OVERRIDES: Mapping[str, Type[FetchStrategy]] = {
    NoDownloadStrategy.tag: NoDownloadStrategy,
    PasswordUnzipDownloadStrategy.tag: PasswordUnzipDownloadStrategy,
    DropboxDownloadStrategy.tag: DropboxDownloadStrategy,
}


class StrategySelector:
    """Resolves tags, overriding a few and delegating the rest.

    The wrapped resolver is never modified; tags outside the override table
    are passed to it unchanged and its result (or exception) is returned
    as-is.

    Examples:
        >>> selector = StrategySelector()
        >>> selector.resolve('dropbox')
        <class 'caskfetch.strategies.dropbox.DropboxDownloadStrategy'>
        >>> selector.resolve('curl')
        <class 'caskfetch.strategies.plain.CurlDownloadStrategy'>
    """

    def __init__(
        self,
        base_resolver: Resolver = detect_from_tag,
        overrides: Optional[Mapping[str, Type[FetchStrategy]]] = None,
    ):
        self.base_resolver = base_resolver
        self.overrides: Dict[str, Type[FetchStrategy]] = dict(
            DEFAULT_OVERRIDES if overrides is None else overrides
        )

    def resolve(self, tag: str) -> Type[FetchStrategy]:
        """Strategy class for ``tag``.

        Raises:
            Whatever the wrapped resolver raises for tags it does not know
        """
        override = self.overrides.get(normalize_tag(tag))
        if override is not None:
            return override
        return self.base_resolver(tag)

    def tags(self) -> Dict[str, Type[FetchStrategy]]:
        """Every tag this selector resolves, with its strategy class.

        Tags of the wrapped resolver are included only when it is the
        global base resolver, since arbitrary resolvers cannot be listed.
        """
        resolved: Dict[str, Type[FetchStrategy]] = {}
        if self.base_resolver is detect_from_tag:
            for tag in _registry.list_types():
                resolved[tag] = _registry.get(tag)
        resolved.update(self.overrides)
        return resolved


_selector = StrategySelector()


def get_selector() -> StrategySelector:
    return _selector


def resolve_strategy(tag: str) -> Type[FetchStrategy]:
    """Resolve a tag with the global selector."""
    return _selector.resolve(tag)
