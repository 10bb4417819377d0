import asyncio
import logging
from collections import Counter
from pathlib import Path

import click
from pydantic import BaseModel

from sitegen.application.catalog_factory import build_catalog
from sitegen.application.config_loader import load_config
from sitegen.application.config_models import SessionSettings, SitegenConfig
from sitegen.application.credentials import EnvCredentialResolver
from sitegen.domain.errors import NoProviderAvailable
from sitegen.domain.models.session_state import ErrorKind, SessionSnapshot, SessionStatus
from sitegen.domain.providers.catalog import ProviderCatalog
from sitegen.domain.providers.random_source import system_random
from sitegen.domain.providers.selector import ProviderSelector
from sitegen.interface.cli.output_models import (
    FallbackOutput,
    GenerateOutput,
    PickOutput,
    ProviderSummary,
    ProvidersOutput,
    ResultOutput,
    ValidateKeyOutput,
)

EXIT_FAILED = 1
EXIT_NOT_READY = 2
EXIT_CANCELLED = 3


def _json_emit(model: BaseModel) -> None:
    # Single-line JSON, omit None fields.
    click.echo(model.model_dump_json(exclude_none=True), nl=True)


def _get_json_mode(ctx: click.Context) -> bool:
    obj = ctx.obj or {}
    return bool(obj.get("json", False))


def _load(ctx: click.Context) -> tuple[SitegenConfig, ProviderCatalog]:
    cfg = load_config(project_root=Path.cwd(), user_home=Path.home())
    results_root = (ctx.obj or {}).get("results_root")
    if results_root is not None:
        cfg = cfg.model_copy(
            update={"session": cfg.session.model_copy(update={"results_root": Path(results_root)})}
        )
    return cfg, build_catalog(cfg)


def _make_transport(settings: SessionSettings):
    """Transport used by generate/validate-key. Patched by tests."""
    from sitegen.application.transport.chat_completions import ChatCompletionsTransport

    return ChatCompletionsTransport(
        connect_timeout=settings.connect_timeout,
        response_timeout=settings.response_timeout,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )


def _fail(ctx: click.Context, output: BaseModel, e: Exception) -> None:
    if _get_json_mode(ctx):
        _json_emit(output)
        raise click.exceptions.Exit(EXIT_FAILED)
    raise click.ClickException(str(e)) from e


@click.group(help="Site generation engine CLI.")
@click.option("--json", "json_output", is_flag=True, help="Emit machine-readable JSON on stdout.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging on stderr.")
@click.option(
    "--results-root",
    "results_root",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for saved results (overrides config).",
)
@click.pass_context
def cli(ctx: click.Context, json_output: bool, verbose: bool, results_root: str | None) -> None:
    ctx.ensure_object(dict)
    ctx.obj["json"] = bool(json_output)
    ctx.obj["results_root"] = results_root
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@cli.command("providers")
@click.pass_context
def providers_cmd(ctx: click.Context) -> None:
    """List the provider catalog with selection shares."""
    try:
        _, catalog = _load(ctx)
        credentials = EnvCredentialResolver(catalog)
        total = catalog.total_weight

        summaries = [
            ProviderSummary(
                name=p.name,
                weight=p.weight,
                share=p.weight / total,
                base_url=p.base_url,
                default_model=p.default_model,
                auth_header_name=p.auth_header_name,
                credential_ref=p.credential_ref,
                credential_present=credentials.resolve(p.name) is not None,
            )
            for p in catalog
        ]

        if _get_json_mode(ctx):
            _json_emit(ProvidersOutput(exit_code=0, providers=summaries))
            raise click.exceptions.Exit(0)

        for s in summaries:
            key_state = "set" if s.credential_present else "missing"
            click.echo(
                f"{s.name:<14} weight={s.weight:<6g} share={s.share:6.1%} "
                f"model={s.default_model} key={s.credential_ref}({key_state})"
            )
    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, ProvidersOutput(exit_code=EXIT_FAILED, error=str(e)), e)


@cli.command("pick")
@click.option("--count", default=1, type=click.IntRange(min=1), help="Number of draws.")
@click.option("--seed", default=None, type=int, help="Seed for reproducible draws.")
@click.pass_context
def pick_cmd(ctx: click.Context, count: int, seed: int | None) -> None:
    """Draw weighted primary picks from the catalog."""
    try:
        _, catalog = _load(ctx)
        selector = ProviderSelector(system_random(seed))
        picks = Counter(selector.pick_weighted(catalog).name for _ in range(count))
        ordered = {name: picks.get(name, 0) for name in catalog.names()}

        if _get_json_mode(ctx):
            _json_emit(PickOutput(exit_code=0, count=count, picks=ordered))
            raise click.exceptions.Exit(0)

        if count == 1:
            click.echo(next(name for name, n in ordered.items() if n))
            return
        for name, n in ordered.items():
            click.echo(f"{name:<14} {n:>8} {n / count:6.1%}")
    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, PickOutput(exit_code=EXIT_FAILED, error=str(e)), e)


@cli.command("fallback")
@click.argument("name", type=str)
@click.pass_context
def fallback_cmd(ctx: click.Context, name: str) -> None:
    """Show the fallback order after NAME fails."""
    try:
        _, catalog = _load(ctx)
        if name not in catalog:
            raise ValueError(
                f"Unknown provider '{name}'. Available providers: {', '.join(catalog.names())}"
            )
        order = [p.name for p in ProviderSelector.fallback_order(catalog, name)]

        if _get_json_mode(ctx):
            _json_emit(FallbackOutput(exit_code=0, exclude=name, order=order))
            raise click.exceptions.Exit(0)

        for position, provider_name in enumerate(order, start=1):
            click.echo(f"{position}. {provider_name}")
    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, FallbackOutput(exit_code=EXIT_FAILED, exclude=name, error=str(e)), e)


async def _run_generation(session, request, max_attempts: int) -> SessionSnapshot:
    """Host policy: resume when there is partial output, otherwise retry."""
    snapshot = await session.generate(request)
    attempts = 1
    while snapshot.status is SessionStatus.FAILED and attempts < max_attempts:
        if snapshot.error is not None and snapshot.error.kind is ErrorKind.CANCELLED:
            break
        if snapshot.content:
            click.echo(f"Attempt failed ({snapshot.error.message}); resuming...", err=True)
            snapshot = await session.resume_from_partial(snapshot.content)
        else:
            message = snapshot.error.message if snapshot.error else "unknown error"
            click.echo(f"Attempt failed ({message}); retrying...", err=True)
            snapshot = await session.retry()
        attempts += 1
    return snapshot


@cli.command("generate")
@click.argument("project_id", type=str)
@click.option("--prompt", required=True, type=str, help="What the website should be.")
@click.option("--provider", "provider_name", default=None, type=str, help="Provider for the first attempt.")
@click.option("--model", default=None, type=str, help="Model override (default: provider's model).")
@click.option(
    "--max-attempts",
    "max_attempts",
    default=1,
    type=click.IntRange(min=1),
    help="Attempts before giving up; later attempts walk the fallback order.",
)
@click.option("--events", is_flag=True, help="Echo session events to stderr.")
@click.pass_context
def generate_cmd(
    ctx: click.Context,
    project_id: str,
    prompt: str,
    provider_name: str | None,
    model: str | None,
    max_attempts: int,
    events: bool,
) -> None:
    """Generate a website for PROJECT_ID and save the result."""
    try:
        from sitegen.application.generation_session import GenerationSession
        from sitegen.application.storage.result_store import ResultStore
        from sitegen.domain.events.emitter import SessionEventEmitter
        from sitegen.domain.events.stderr_observer import StderrEventObserver
        from sitegen.domain.models.generation import GenerationRequest

        cfg, catalog = _load(ctx)
        settings = cfg.session
        store = ResultStore(results_root=settings.results_root)

        emitter = SessionEventEmitter()
        if events:
            emitter.subscribe(StderrEventObserver(), project_id=project_id)

        session = GenerationSession(
            project_id,
            catalog=catalog,
            transport=_make_transport(settings),
            credentials=EnvCredentialResolver(catalog),
            result_sink=store,
            event_emitter=emitter,
            response_timeout=settings.response_timeout,
            provider=provider_name,
        )
        request = GenerationRequest(project_id=project_id, prompt=prompt, model=model)

        try:
            snapshot = asyncio.run(_run_generation(session, request, max_attempts))
        except KeyboardInterrupt:
            snapshot = session.snapshot()
            if _get_json_mode(ctx):
                _json_emit(
                    GenerateOutput(
                        exit_code=EXIT_CANCELLED,
                        project_id=project_id,
                        status=snapshot.status.name,
                        attempt=snapshot.attempt,
                        error_kind=ErrorKind.CANCELLED.value,
                    )
                )
            else:
                click.echo("Generation cancelled.", err=True)
            raise click.exceptions.Exit(EXIT_CANCELLED)

        provider = snapshot.active_provider.name if snapshot.active_provider else None
        result = snapshot.final_result

        if snapshot.status is SessionStatus.SUCCEEDED and result is not None:
            exit_code = 0
        elif snapshot.error is not None and snapshot.error.kind is ErrorKind.CANCELLED:
            exit_code = EXIT_CANCELLED
        else:
            exit_code = EXIT_FAILED

        result_path = None
        if exit_code == 0 and snapshot.handoff_error is None:
            result_path = str(settings.results_root / project_id)

        if _get_json_mode(ctx):
            _json_emit(
                GenerateOutput(
                    exit_code=exit_code,
                    project_id=project_id,
                    status=snapshot.status.name,
                    attempt=snapshot.attempt,
                    provider=provider,
                    error_kind=snapshot.error.kind.value if snapshot.error else None,
                    error=snapshot.error.message if snapshot.error else snapshot.handoff_error,
                    files=sorted(result.files) if result else [],
                    preview_url=result.preview_url if result else None,
                    result_path=result_path,
                )
            )
            raise click.exceptions.Exit(exit_code)

        click.echo(f"status={snapshot.status.name} attempt={snapshot.attempt} provider={provider}")
        if result is not None:
            for name in sorted(result.files):
                click.echo(f"  {name}")
            if result.preview_url:
                click.echo(f"preview_url={result.preview_url}")
        if result_path:
            click.echo(f"result_path={result_path}")
        if snapshot.handoff_error:
            click.echo(f"Result not saved: {snapshot.handoff_error}", err=True)
        if snapshot.error is not None:
            click.echo(f"error={snapshot.error.message}", err=True)
        if exit_code:
            raise click.exceptions.Exit(exit_code)

    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, GenerateOutput(exit_code=EXIT_FAILED, project_id=project_id, error=str(e)), e)


@cli.command("result")
@click.argument("project_id", type=str)
@click.pass_context
def result_cmd(ctx: click.Context, project_id: str) -> None:
    """Show the saved result for PROJECT_ID (exit 2 if none yet)."""
    try:
        from sitegen.application.storage.result_store import ResultStore

        cfg, _ = _load(ctx)
        result = ResultStore(results_root=cfg.session.results_root).load(project_id)

        if result is None:
            if _get_json_mode(ctx):
                _json_emit(ResultOutput(exit_code=EXIT_NOT_READY, project_id=project_id))
            else:
                click.echo(f"No result for project {project_id} yet.", err=True)
            raise click.exceptions.Exit(EXIT_NOT_READY)

        if _get_json_mode(ctx):
            _json_emit(
                ResultOutput(
                    exit_code=0,
                    project_id=project_id,
                    available=True,
                    provider=result.provider,
                    model=result.model,
                    files=sorted(result.files),
                    preview_url=result.preview_url,
                )
            )
            raise click.exceptions.Exit(0)

        click.echo(f"provider={result.provider} model={result.model}")
        for name in sorted(result.files):
            click.echo(f"  {name}")
        if result.preview_url:
            click.echo(f"preview_url={result.preview_url}")
    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, ResultOutput(exit_code=EXIT_FAILED, project_id=project_id, error=str(e)), e)


@cli.command("validate-key")
@click.argument("name", type=str)
@click.option("--model", default=None, type=str, help="Model to test with (default: provider's model).")
@click.pass_context
def validate_key_cmd(ctx: click.Context, name: str, model: str | None) -> None:
    """Check that provider NAME's configured credential works."""
    try:
        cfg, catalog = _load(ctx)
        provider = catalog.get(name)
        if provider is None:
            raise ValueError(
                f"Unknown provider '{name}'. Available providers: {', '.join(catalog.names())}"
            )

        credential = EnvCredentialResolver(catalog).resolve(name)
        if credential is None:
            raise NoProviderAvailable(
                f"No API key configured for {name} (set {provider.credential_ref})",
                provider=name,
            )

        transport = _make_transport(cfg.session)
        outcome = asyncio.run(transport.validate_credential(provider, credential, model=model))
        exit_code = 0 if outcome.valid else EXIT_FAILED

        if _get_json_mode(ctx):
            _json_emit(
                ValidateKeyOutput(
                    exit_code=exit_code, provider=name, valid=outcome.valid, error=outcome.error
                )
            )
            raise click.exceptions.Exit(exit_code)

        if outcome.valid:
            click.echo(f"{name}: valid")
        else:
            click.echo(f"{name}: invalid ({outcome.error})")
            raise click.exceptions.Exit(exit_code)
    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, ValidateKeyOutput(exit_code=EXIT_FAILED, provider=name, error=str(e)), e)
