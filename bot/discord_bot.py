from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Optional

import discord
from discord import app_commands

from config.loader import load_settings
from .agent import NO_RESPONSE_MESSAGE
from .context import BotContext, build_context
from .discord_render import SECTION_JOIN, build_embeds, chunk_text, parse_response_sections


HELP_TEXT = (
    "I can help you request movies and TV shows. Just tell me what you want.\n\n"
    "Examples:\n"
    "- Request the movie Inception\n"
    "- Get me the latest season of Severance\n"
    "- Add all seasons of The Bear\n"
    "- What's trending right now?\n"
    "- Show pending requests\n"
    "- Approve request #42"
)
RESET_COMMANDS = ("new conversation", "start over", "reset", "forget")
# Courtesy words allowed after a reset phrase
RESET_TAIL_WORDS = ("please", "pls", "now", "it", "everything", "thanks")
RESET_REPLY = "Started a new conversation! What would you like to watch?"
UNEXPECTED_ERROR_MESSAGE = "Sorry, I encountered an error processing your request. Please try again later."


def extract_request_text(content: str, bot_user_id: Optional[int]) -> str:
    """Drop the bot's own mention (<@id> or <@!id>) and surrounding whitespace."""
    if bot_user_id is not None:
        content = re.sub(rf"<@!?{bot_user_id}>", "", content)
    return content.strip()


def is_reset_command(text: str) -> bool:
    # Whole message only, so titles like "Forget Paris" are still requests
    words = re.sub(r"[^\w\s]+", " ", text.lower()).split()
    while words and words[-1] in RESET_TAIL_WORDS:
        words = words[:-1]
    return " ".join(words) in RESET_COMMANDS


class SeerrBotClient(discord.Client):
    def __init__(self, *, intents: discord.Intents, context: BotContext):
        super().__init__(intents=intents)
        self.tree = app_commands.CommandTree(self)
        self.ctx = context
        self.log = logging.getLogger("seerrbot.bot")
        self._sweep_task: Optional[asyncio.Task] = None

    async def setup_hook(self) -> None:
        # During development, sync commands to a single guild if provided
        guild_id = self.ctx.settings.discord_development_guild_id
        if guild_id:
            guild = discord.Object(id=int(guild_id))
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
        else:
            await self.tree.sync()
        self._sweep_task = asyncio.create_task(self._sweep_sessions_loop())

    async def _sweep_sessions_loop(self) -> None:
        while True:
            await asyncio.sleep(self.ctx.sweep_interval_sec)
            self.ctx.sessions.sweep()

    async def close(self) -> None:
        if self._sweep_task is not None:
            self._sweep_task.cancel()
        await self.ctx.aclose()
        await super().close()

    async def _send_response(self, message: discord.Message, text: str) -> None:
        sections = parse_response_sections(text)
        if any(s.poster_url for s in sections):
            await message.reply(embeds=build_embeds(sections), mention_author=False)
            return
        full_text = SECTION_JOIN.join(s.text for s in sections if s.text) or NO_RESPONSE_MESSAGE
        chunks = chunk_text(full_text)
        await message.reply(chunks[0], mention_author=False)
        for chunk in chunks[1:]:
            await message.channel.send(chunk)

    async def _handle_request(self, message: discord.Message) -> None:
        user_id = str(message.author.id)
        content = extract_request_text(message.content or "", self.user.id if self.user else None)
        if not content:
            await message.reply(HELP_TEXT, mention_author=False)
            return
        if is_reset_command(content):
            self.ctx.sessions.clear(user_id)
            self.log.info("session reset", extra={"user_id": user_id})
            await message.reply(RESET_REPLY, mention_author=False)
            return

        self.log.info("processing request", extra={"user_id": user_id, "chars": len(content)})
        async with message.channel.typing():
            prior = self.ctx.sessions.get(user_id)
            result = await self.ctx.agent.run(content, prior)
            self.ctx.sessions.set(user_id, result.messages)
        if self.log.isEnabledFor(logging.DEBUG):
            self.log.debug("session size", extra={
                "user_id": user_id,
                "message_count": len(result.messages),
                "token_count": self.ctx.sessions.token_count(user_id),
            })
        await self._send_response(message, result.text)
        self.log.info("responded", extra={"user_id": user_id, "reason": result.reason})

    async def on_message(self, message: discord.Message) -> None:  # type: ignore[override]
        # Ignore bot/self messages
        if message.author.bot:
            return
        is_dm = message.guild is None
        mentioned = False
        if self.user:
            mentioned = self.user in message.mentions  # type: ignore[truthy-bool]
        if not is_dm and not mentioned:
            return
        try:
            await self._handle_request(message)
        except Exception:
            self.log.exception("error processing request", extra={"user_id": str(message.author.id)})
            await message.reply(UNEXPECTED_ERROR_MESSAGE, mention_author=False)

    async def on_error(self, event_method: str, *args, **kwargs) -> None:  # type: ignore[override]
        self.log.exception("discord client error", extra={"event": event_method})


def build_client(context: BotContext) -> SeerrBotClient:
    intents = discord.Intents.default()
    intents.message_content = True  # required for reading user messages
    intents.dm_messages = True
    client = SeerrBotClient(intents=intents, context=context)

    @client.tree.command(name="ping", description="Health check")
    async def ping(interaction: discord.Interaction) -> None:
        await interaction.response.send_message("Pong!", ephemeral=True)

    @client.event
    async def on_ready() -> None:  # type: ignore[override]
        client.log.info("online", extra={"bot_user": str(client.user)})
        await client.change_presence(
            status=discord.Status.online,
            activity=discord.Activity(type=discord.ActivityType.listening, name="your requests"),
        )

    return client


async def run_bot() -> None:
    project_root = Path(__file__).resolve().parents[1]
    settings = load_settings(project_root)
    if not settings.discord_token:
        raise RuntimeError("DISCORD_TOKEN missing. Set it in .env.")

    client = build_client(build_context(project_root, settings))
    async with client:
        await client.start(settings.discord_token)
