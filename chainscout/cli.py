"""Chainscout CLI - ask questions about Ethereum in plain language."""

import logging
import sys
from typing import Optional

import click

from .blockscout import BlockscoutClient
from .config import ConfigManager
from .errors import ConfigError
from .orchestrator import Orchestrator, OrchestratorConfig, TraceEvent, TurnResult, TurnStatus
from .prompts import resolve_system_prompt
from .providers.base import BaseProvider
from .providers.registry import create_provider
from .tools import ToolRegistry, build_tool_registry
from .ui import (
    CYAN,
    console,
    render_error,
    render_notice,
    render_response,
    render_thinking,
    render_tool_call,
)

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    """Route log records through rich; DEBUG when debugging, WARNING otherwise."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)


class ChainscoutApp:
    """Main Chainscout application: config, model, tools and the conversation loop."""

    def __init__(
        self,
        config: ConfigManager,
        provider: Optional[BaseProvider] = None,
        blockscout: Optional[BlockscoutClient] = None,
    ):
        self.config = config
        self.debug = config.debug_enabled()
        self._provider = provider
        self.blockscout = blockscout or self._build_blockscout()
        self.tool_registry = self._build_tool_registry()
        self._orchestrator: Optional[Orchestrator] = None

    def _build_blockscout(self) -> BlockscoutClient:
        settings = self.config.get_blockscout_config()
        return BlockscoutClient(
            base_url=settings["base_url"],
            timeout=settings.get("timeout", 30),
        )

    def _build_tool_registry(self) -> ToolRegistry:
        """Build tool registry, honoring per-tool overrides from config."""
        return build_tool_registry(self.blockscout, self.config.get_tools_config())

    def _init_provider(self) -> BaseProvider:
        """Instantiate the configured provider from the registry."""
        provider_config = self.config.get_provider_config()
        if provider_config is None:
            reference = self.config.get_api_key_reference()
            hint = reference[2:-1] if reference.startswith("${") else "an API key"
            raise click.ClickException(f"Please set {hint} (see {self.config.config_path})")

        try:
            return create_provider(self.config.get_provider_name(), provider_config)
        except ConfigError as e:
            raise click.ClickException(str(e)) from e

    @property
    def provider(self) -> BaseProvider:
        if self._provider is None:
            self._provider = self._init_provider()
        return self._provider

    @property
    def orchestrator(self) -> Orchestrator:
        if self._orchestrator is None:
            settings = self.config.get_orchestrator_config()
            self._orchestrator = Orchestrator(
                self.provider,
                self.tool_registry,
                OrchestratorConfig(
                    system_prompt=resolve_system_prompt(settings),
                    max_rounds=int(settings["max_rounds"]),
                    max_turns=int(settings["max_turns"]),
                    concurrent_tools=bool(settings["concurrent_tools"]),
                    max_workers=int(settings["max_workers"]),
                    trace=self._on_trace,
                    on_narration=render_thinking,
                ),
            )
        return self._orchestrator

    def _on_trace(self, event: TraceEvent) -> None:
        if event.kind == "tool_call":
            render_tool_call(event.data["name"], event.data["arguments"])
        logger.debug("trace %s: %s", event.kind, event.data)

    def ask(self, prompt: str) -> TurnResult:
        """Run one user turn and render its outcome."""
        result = self.orchestrator.run_turn(prompt)

        if result.status == TurnStatus.ANSWERED:
            render_response(result.text)
        elif result.status == TurnStatus.BUDGET_EXHAUSTED:
            render_notice(result.text)
        else:
            render_error(result.text)
        return result

    def close(self) -> None:
        self.blockscout.close()
        if self._provider is not None:
            self._provider.close()


def get_app(ctx: click.Context) -> ChainscoutApp:
    """Get or create the app instance for this invocation."""
    obj = ctx.ensure_object(dict)
    if "app" not in obj:
        config = ConfigManager(obj.get("config_path"))
        if obj.get("debug"):
            config.data["debug"] = True
        configure_logging(config.debug_enabled())
        obj["app"] = ChainscoutApp(config)
        ctx.call_on_close(obj["app"].close)
    return obj["app"]


# CLI Commands
@click.group(invoke_without_command=True)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Path to config.yaml")
@click.option("--debug", is_flag=True, help="Verbose logging of model and tool traffic")
@click.pass_context
def cli(ctx, config_path, debug):
    """CHAINSCOUT - Ethereum questions answered through Blockscout.

    Run without a command to start an interactive chat.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["debug"] = debug
    if ctx.invoked_subcommand is None:
        ctx.invoke(chat)


@cli.command()
@click.pass_context
def chat(ctx):
    """Start interactive chat mode."""
    from .repl import ChainscoutREPL

    app = get_app(ctx)
    # Fail before the loop starts when the model cannot be configured
    app.orchestrator
    ChainscoutREPL(app).run()


@cli.command()
@click.argument("prompt", nargs=-1, required=True)
@click.pass_context
def ask(ctx, prompt):
    """Ask a single question."""
    app = get_app(ctx)
    prompt_text = " ".join(prompt)
    try:
        result = app.ask(prompt_text)
    except click.ClickException:
        raise
    except Exception as e:
        render_error(str(e))
        sys.exit(1)
    if not result.ok:
        sys.exit(1)


@cli.command()
@click.pass_context
def tools(ctx):
    """List the tools the model can call."""
    app = get_app(ctx)
    console.print(f"\nTools ({len(app.tool_registry)}):", style=f"bold {CYAN}")
    for spec in app.tool_registry.definitions:
        params = ", ".join(
            f"{p.name}: {p.type}" + ("" if p.required else "?")
            for p in spec.params
        )
        console.print(f"  {spec.name}({params})")
        console.print(f"      {spec.description}", style="dim", overflow="fold")
    console.print()


@cli.command()
@click.pass_context
def config(ctx):
    """Show configuration."""
    app = get_app(ctx)
    settings = app.config.get_orchestrator_config()
    provider_config = app.config.get_provider_config()

    console.print(f"Config file: {app.config.config_path}")
    console.print(f"Provider: {app.config.get_provider_name()}")
    console.print(f"Model: {provider_config.model if provider_config else '(no API key)'}")
    console.print(f"Blockscout: {app.blockscout.base_url}")
    console.print(f"Max rounds: {settings['max_rounds']}  Max turns: {settings['max_turns']}")


if __name__ == "__main__":
    cli()
