"""Registry mapping database engine names to metadata adapters."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from schemadoc.core.adapters.base import MetadataAdapter
from schemadoc.core.adapters.exceptions import AdapterNotFoundError


@dataclass
class AdapterInfo:
    """Metadata about a registered adapter."""

    engine: str
    display_name: str
    adapter_class: type[MetadataAdapter]
    config_schema: type[BaseModel]
    default_port: int | None


class AdapterRegistry:
    """Registry for metadata adapters.

    Adapters register themselves with the @register decorator and are looked up
    by engine name (the value of ``DB_TYPE``):

        @AdapterRegistry.register(
            engine="postgresql",
            display_name="PostgreSQL",
            config_schema=PostgreSQLConfig,
        )
        class PostgreSQLAdapter(MetadataAdapter):
            ...

        adapter = AdapterRegistry.get_adapter("postgresql", config_dict)
    """

    _adapters: dict[str, AdapterInfo] = {}

    @classmethod
    def register(
        cls,
        engine: str,
        display_name: str,
        config_schema: type[BaseModel],
    ) -> Callable[[type[MetadataAdapter]], type[MetadataAdapter]]:
        """Decorator to register an adapter class.

        Args:
            engine: Unique engine identifier (e.g., 'postgresql').
            display_name: Human-readable name for display.
            config_schema: Pydantic model class for configuration validation.

        Returns:
            Decorator function.
        """

        def decorator(adapter_class: type[MetadataAdapter]) -> type[MetadataAdapter]:
            port_field = config_schema.model_fields.get("port")
            cls._adapters[engine] = AdapterInfo(
                engine=engine,
                display_name=display_name,
                adapter_class=adapter_class,
                config_schema=config_schema,
                default_port=port_field.default if port_field is not None else None,
            )
            return adapter_class

        return decorator

    @classmethod
    def get_adapter(cls, engine: str, config: dict[str, Any]) -> MetadataAdapter:
        """Instantiate an adapter by engine name.

        Args:
            engine: The registered engine name.
            config: Configuration dict to validate and pass to the adapter.

        Returns:
            Instantiated adapter (not yet connected).

        Raises:
            AdapterNotFoundError: If engine is not registered.
            ValidationError: If config is invalid.
        """
        info = cls.get_adapter_info(engine)
        validated_config = info.config_schema(**config)
        return info.adapter_class(validated_config)

    @classmethod
    def get_adapter_info(cls, engine: str) -> AdapterInfo:
        """Get metadata about a registered adapter.

        Raises:
            AdapterNotFoundError: If engine is not registered.
        """
        if engine not in cls._adapters:
            raise AdapterNotFoundError(engine)
        return cls._adapters[engine]

    @classmethod
    def list_adapters(cls) -> list[AdapterInfo]:
        return list(cls._adapters.values())

    @classmethod
    def get_config_schema(cls, engine: str) -> type[BaseModel]:
        return cls.get_adapter_info(engine).config_schema

    @classmethod
    def is_registered(cls, engine: str) -> bool:
        return engine in cls._adapters

    @classmethod
    def available_types(cls) -> list[str]:
        return list(cls._adapters.keys())
