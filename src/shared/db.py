"""Schema management for SQL-backed Protean providers.

The memory provider needs no schema; for sqlite/postgresql we touch every
repository DAO so its table is registered in the provider's metadata, then
let SQLAlchemy create or drop the tables.
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


def _register_tables(domain: Domain, provider_name: str) -> None:
    registry = domain.registry
    for records in (registry.aggregates, registry.entities, registry.projections):
        for _, record in records.items():
            if record.cls.meta_.provider == provider_name:
                domain.repository_for(record.cls)._dao  # noqa: B018

    outbox_repos = getattr(domain, "_outbox_repos", {})
    if provider_name in outbox_repos:
        outbox_repos[provider_name]._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            _register_tables(domain, name)
            provider._metadata.create_all(engine)
            logger.info("Schema created", domain=domain.name, provider=name)


def drop_db(domain: Domain) -> None:
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
            logger.info("Schema dropped", domain=domain.name, provider=name)
