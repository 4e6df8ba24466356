"""Relational schema management for deployments that use SQL providers.

The default configuration keeps everything in memory; these helpers only
touch providers backed by SQLite or PostgreSQL.
"""

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine

logger = structlog.get_logger(__name__)

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for name, provider in domain.providers.items():
        if provider.conn_info["provider"] in _SQL_PROVIDERS:
            yield name, provider


def _register_models(domain: Domain, provider) -> None:
    # Touching _dao forces Protean to build the SQLAlchemy model for each element
    for registry in (domain.registry.aggregates, domain.registry.entities):
        for _, record in registry.items():
            if record.cls.meta_.provider == provider.name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> int:
    """Create tables for every SQL-backed provider. Returns the provider count."""
    created = 0
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            _register_models(domain, provider)
            provider._metadata.create_all(engine)
            logger.info("Database schema created", provider=name)
            created += 1
    return created


def drop_db(domain: Domain) -> int:
    """Drop tables for every SQL-backed provider. Returns the provider count."""
    dropped = 0
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
            logger.info("Database schema dropped", provider=name)
            dropped += 1
    return dropped
