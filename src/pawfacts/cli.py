"""Interactive terminal front end."""

import os
import uuid
from pathlib import Path

from groq import AsyncGroq

from .agent import AgentConfig, AgentLoop, StopReason
from .facts import CAT_FACT_URL, DOG_IMAGE_URL, FactFetcher, FetcherConfig
from .logging import JSONLLogger, configure_logger, get_logger
from .session import SessionBusyError, SessionConfig, SessionManager
from .tools import DEFAULT_CHAT_ID, ToolRegistry, build_fact_tools

HISTORY_LIMIT = 20
EXIT_WORDS = ("/exit", "/quit", "exit", "quit")

BANNER = """
╔══════════════════════════════════════════╗
║           🐾 pawfacts v0.1.0             ║
║    Random dog images and cat facts       ║
╚══════════════════════════════════════════╝

Ask me for a dog image or a cat fact!

Commands:
  /exit, /quit  - Exit the CLI
  /facts        - Show the latest fetched facts
  /reset        - Start a new session
  /help         - Show this help

Type your message and press Enter.
"""


def _config_from_env() -> tuple[AgentConfig, FetcherConfig, SessionConfig]:
    """Read GROQ_MODEL and the PAWFACTS_* variables."""
    sessions_dir = os.getenv("PAWFACTS_SESSIONS_DIR")
    return (
        AgentConfig(model=os.getenv("GROQ_MODEL", AgentConfig.model)),
        FetcherConfig(
            dog_url=os.getenv("PAWFACTS_DOG_API_URL", DOG_IMAGE_URL),
            cat_url=os.getenv("PAWFACTS_CAT_API_URL", CAT_FACT_URL),
        ),
        SessionConfig(sessions_dir=Path(sessions_dir).expanduser() if sessions_dir else None),
    )


class CLI:
    """Reads lines from stdin and answers through the agent."""

    def __init__(
        self,
        registry: ToolRegistry | None = None,
        config: AgentConfig | None = None,
        fetcher: FactFetcher | None = None,
        sessions: SessionManager | None = None,
        groq_client: AsyncGroq | None = None,
        logger: JSONLLogger | None = None,
        chat_id: str | None = None,
    ) -> None:
        agent_config, fetcher_config, session_config = _config_from_env()

        self.config = config or agent_config
        self.sessions = sessions or SessionManager(session_config)
        self.logger = logger or get_logger()
        self.groq_client = groq_client

        if registry is None:
            registry = ToolRegistry()
            fetcher = fetcher or FactFetcher(fetcher_config)
            for tool in build_fact_tools(fetcher, self.sessions, logger=self.logger):
                registry.register(tool)

        self.registry = registry
        self.chat_id = chat_id or os.getenv("PAWFACTS_CHAT_ID") or DEFAULT_CHAT_ID
        self.agent: AgentLoop | None = None
        self.commands = {
            "/reset": self._reset,
            "/facts": self._show_facts,
            "/help": lambda: print(BANNER),
        }

    def _start_session(self) -> None:
        self.agent = AgentLoop(
            self.registry,
            self.config,
            groq_client=self.groq_client,
            sessions=self.sessions,
            logger=self.logger,
        )
        self.sessions.get_session(self.chat_id)
        self.logger.set_chat_id(self.chat_id)
        self.logger.log("session_start", chat_id=self.chat_id)

    def _end_session(self, reason: str) -> None:
        print("\n👋 Goodbye!")
        self.logger.log("session_end", chat_id=self.chat_id, reason=reason)

    def _reset(self) -> None:
        """Switch to a fresh session; the old one is left untouched."""
        old_chat_id = self.chat_id
        self.chat_id = f"cli-{uuid.uuid4().hex[:8]}"
        self._start_session()
        self.logger.log("session_reset", old_chat_id=old_chat_id, chat_id=self.chat_id)
        print(f"\n✓ Session reset. New chat_id: {self.chat_id}")

    def _show_facts(self) -> None:
        print("\n" + self.sessions.facts(self.chat_id).render())

    def _format_response(self, response: str, stop_reason: StopReason, turns: int) -> str:
        rule = "─" * 40
        lines = ["\n" + rule, response, rule]
        if stop_reason != StopReason.COMPLETE:
            lines.append(f"⚠ Stopped: {stop_reason.value} (turns: {turns})")
        return "\n".join(lines)

    async def _process_message(self, message: str) -> None:
        """Answer one message inside the session's turn; a busy session is reported, not queued."""
        if self.agent is None:
            self._start_session()
        assert self.agent is not None

        try:
            async with self.sessions.turn(self.chat_id):
                history = self.sessions.history(self.chat_id, limit=HISTORY_LIMIT)
                result = await self.agent.run(message, chat_id=self.chat_id, history=history)
                self.sessions.add_message(self.chat_id, "user", message)
                self.sessions.add_message(self.chat_id, "assistant", result.response)
        except SessionBusyError as e:
            print(f"\n{e}")
            return
        except Exception as e:
            print(f"\n❌ Error: {e}")
            self.logger.log("error", chat_id=self.chat_id, error=str(e))
            return

        print(self._format_response(result.response, result.stop_reason, result.turns))

    async def _handle_command(self, command: str) -> bool:
        """Run a slash command. Returns False when the CLI should exit."""
        cmd = command.lower().strip()

        if cmd in EXIT_WORDS:
            self._end_session("exit")
            return False

        action = self.commands.get(cmd)
        if action is None:
            print(f"Unknown command: {command}. Type /help for the list.")
        else:
            action()
        return True

    async def run(self) -> None:
        print(BANNER)
        print(f"Session: {self.chat_id}\n")
        self._start_session()

        while True:
            try:
                user_input = input("you> ").strip()
            except EOFError:
                self._end_session("eof")
                return
            except KeyboardInterrupt:
                print("\n\n⚡ Interrupted")
                try:
                    confirm = input("Exit? (y/n): ").strip().lower()
                except (KeyboardInterrupt, EOFError):
                    confirm = "y"
                if confirm in ("y", "yes"):
                    self._end_session("interrupt")
                    return
                continue

            if not user_input:
                continue

            if user_input.startswith("/") or user_input.lower() in EXIT_WORDS:
                if not await self._handle_command(user_input):
                    return
                continue

            await self._process_message(user_input)


async def run_cli() -> None:
    """Run the CLI with default configuration."""
    configure_logger()

    if not os.getenv("GROQ_API_KEY"):
        print("❌ Error: GROQ_API_KEY environment variable not set")
        print("Please set it in your .env file or environment")
        return

    await CLI().run()
