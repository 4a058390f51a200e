import click
import uvicorn
from event_analytics.core.logging import get_logger
from event_analytics.core.config import settings

logger = get_logger(__name__)


@click.group()
def cli():
    """Event analytics CLI"""
    pass


@cli.command()
@click.option("--host", default=settings.HOST)
@click.option("--port", default=settings.PORT)
@click.option("--workers", default=1)
@click.option("--production", is_flag=True, help="Run in production mode")
def serve(host, port, workers, production):
    """Start the API server"""
    reload = not production  # Auto-reload unless production mode

    uvicorn.run(
        "event_analytics.api.web_app:app",
        host=host,
        port=port,
        reload=reload,
        workers=workers if production else 1,
        log_level="info" if production else "debug",
    )


@cli.command("init-db")
def init_db():
    """Create database tables (development; use alembic in production)"""
    from event_analytics.db.base import Base, engine
    import event_analytics.db.models  # noqa: F401  registers models on Base.metadata

    Base.metadata.create_all(bind=engine)
    click.echo(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")


@cli.command("check-cache")
def check_cache():
    """Report whether the configured cache backend is reachable"""
    from event_analytics.services.cache_service import RedisCache, build_cache

    cache = build_cache()
    if not isinstance(cache, RedisCache):
        click.echo("Cache disabled (CACHE_REDIS_URL not set)")
        return

    try:
        if cache.ping():
            click.echo("Cache reachable")
        else:
            click.echo("Cache unreachable; aggregates will be computed uncached")
            raise SystemExit(1)
    finally:
        cache.close()


if __name__ == "__main__":
    cli()
