"""Repository query helpers shared by every domain."""

from protean.utils.globals import current_domain


def fetch_all(model, **filters) -> list:
    """Every record of ``model`` matching the equality ``filters``, without paging."""
    query = current_domain.repository_for(model)._dao.query
    if filters:
        query = query.filter(**filters)
    return query.limit(None).all().items
