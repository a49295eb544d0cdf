"""Base provider for Tessera's dishka providers."""

from dishka import Provider as DishkaProvider

from tessera.util.di.scope import Scope


class Provider(DishkaProvider):
    """dishka Provider defaulting to Scope.UOW.

    Providers declare APP-scoped factories explicitly; everything else lives
    for one unit of work.
    """

    scope = Scope.UOW
