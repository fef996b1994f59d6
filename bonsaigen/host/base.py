"""Base class for compilation hosts consumed by the generation pipeline."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from ..models import PropertySymbol, TypeRef, TypeSymbol
from ..syntax import PropertyDeclaration


class SemanticHost(ABC):
    """Contract for the parser/resolver a generation pass runs against."""

    @abstractmethod
    def iter_property_declarations(self) -> Iterable[PropertyDeclaration]:
        """Yield every property declaration in the program, in source order."""

    @abstractmethod
    def resolve_symbol(self, node: PropertyDeclaration) -> Optional[PropertySymbol]:
        """Return the symbol declared by ``node`` or None when it cannot be resolved."""

    def get_attributes(self, symbol: PropertySymbol) -> Sequence[str]:
        """Return the fully-qualified attribute class names applied to ``symbol``."""
        return symbol.attributes

    def type_arguments(self, type_ref: TypeRef) -> Sequence[TypeRef]:
        """Return the positional type arguments of ``type_ref``."""
        return type_ref.type_arguments

    def containing_type(self, symbol: PropertySymbol) -> TypeSymbol:
        """Return the type that directly declares ``symbol``."""
        return symbol.containing_type
