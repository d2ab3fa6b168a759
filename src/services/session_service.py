"""
Orchestration between the verified callbacks (API layer), the game rules (domain layer) and the match store (db layer).

Every public method returns the next screen to show. Expected conditions (unknown match, missing moves, no opponent
yet) are ordinary transitions and never leave this module as exceptions.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import Callable, Optional
from urllib.parse import urlencode

from src.api.models import ButtonSpec, ScreenDescriptor
from src.core.config import Settings
from src.core.exceptions import InvalidMoveSelectionError, MatchNotFoundError
from src.core.models import Identity, utc_now
from src.core.shared_types import ButtonKind, MatchStatus, Move, Outcome, Screen
from src.db.locks import KeyedLocks
from src.db.repository import MatchRepository
from src.rps.match import Match
from src.rps.moves import is_move_button, move_from_button, random_move, resolve
from src.services.verification import VerifiedAction

logger = logging.getLogger(__name__)

# Query parameter carrying the session across callbacks
MATCH_ID_PARAM = "matchId"

BOT_OUTCOME_TITLES: dict[Outcome, str] = {
    Outcome.DRAW: "Draw!",
    Outcome.FIRST_WINS: "You Win!",
    Outcome.SECOND_WINS: "Bot Wins!",
}

MOVE_BUTTONS = [ButtonSpec(label=move.value.capitalize()) for move in Move]


class SessionService:
    """State machine of the frame: decides the next screen for every verified tap."""

    def __init__(
        self,
        repository: MatchRepository,
        settings: Settings,
        locks: Optional[KeyedLocks] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.repo = repository
        self.settings = settings
        self.locks = locks or KeyedLocks()
        self.rng = rng or random.Random()
        self.clock = clock

    # -- Entry screens (no callback data needed) --
    def home(self) -> ScreenDescriptor:
        return self._screen(
            Screen.HOME,
            title="Rock Paper Scissors",
            image="start",
            buttons=self._home_buttons(),
            post_url=self._url("/action"),
        )

    def how_to_play(self) -> ScreenDescriptor:
        return self._screen(
            Screen.HOW_TO_PLAY,
            title="How to Play: rock beats scissors, scissors beats paper, paper beats rock",
            image="howto",
            buttons=[ButtonSpec(label="Back")],
            post_url=self._url("/"),
        )

    def connect_wallet(self) -> ScreenDescriptor:
        return self._screen(
            Screen.CONNECT_WALLET,
            title="Connect Wallet",
            image="connect",
            buttons=[
                ButtonSpec(
                    label="Base",
                    kind=ButtonKind.EXTERNAL_LINK,
                    target=self.settings.base_connect_url,
                ),
                ButtonSpec(
                    label="Arbitrum",
                    kind=ButtonKind.EXTERNAL_LINK,
                    target=self.settings.arb_connect_url,
                ),
                ButtonSpec(label="Back"),
            ],
            post_url=self._url("/"),
        )

    def error(self, title: str) -> ScreenDescriptor:
        return self._screen(
            Screen.ERROR,
            title=title,
            image="error",
            buttons=[ButtonSpec(label="Back")],
            post_url=self._url("/"),
        )

    def choose_move_bot(self) -> ScreenDescriptor:
        return self._screen(
            Screen.CHOOSE_MOVE_BOT,
            title="Play Bot - Choose",
            image="choose",
            buttons=list(MOVE_BUTTONS),
            post_url=self._url("/bot"),
        )

    def invite(self, match_id: Optional[str]) -> ScreenDescriptor:
        """Screen behind a shared lobby link: lets anyone pick a move for that match."""
        try:
            match_id = self._require_match_id(match_id)
            with self.locks.hold(match_id):
                self._fetch_match(match_id)
        except MatchNotFoundError as exc:
            logger.info("Invite for unknown match: %s", exc)
            return self.match_not_found()
        return self._screen(
            Screen.CHOOSE_MOVE_PVP,
            title="PvP Challenge - Choose",
            image="choose",
            buttons=[*MOVE_BUTTONS, ButtonSpec(label="Refresh")],
            post_url=self._match_url(match_id),
        )

    # -- Callback routes logic ---
    def handle_home_action(self, action: VerifiedAction) -> ScreenDescriptor:
        """Tap on Home (or on a result screen, which shares Home's button layout)."""
        match action.button_index:
            case 1:
                return self.choose_move_bot()
            case 2:
                return self.create_lobby(action.identity)
            case 3:
                return self.how_to_play()
            case 4:
                return self.connect_wallet()
            case _:
                return self.home()

    def create_lobby(self, initiator: Identity) -> ScreenDescriptor:
        """Open a new PvP match owned by the caller."""
        new_match = Match.new_match(initiator, created_at=self.clock())
        _, match_id = self.repo.create_match(new_match.to_model())
        logger.info("Match %s created by fid=%s", match_id, initiator)

        share_link = (
            f"{self.settings.share_url_base}?"
            f"{urlencode({'embeds[]': self._match_url(match_id)})}"
        )
        return self._screen(
            Screen.LOBBY_CREATED,
            title="PvP Lobby Created - share it and pick your move",
            image="lobby",
            buttons=[
                *MOVE_BUTTONS,
                ButtonSpec(label="Share", kind=ButtonKind.EXTERNAL_LINK, target=share_link),
            ],
            post_url=self._match_url(match_id),
        )

    def play_bot(self, action: VerifiedAction) -> ScreenDescriptor:
        """A single, independent round against a uniformly random bot move."""
        try:
            player_move = move_from_button(action.button_index)
        except InvalidMoveSelectionError:
            return self.choose_move_bot()

        bot_move = random_move(self.rng)
        outcome = resolve(player_move, bot_move)
        logger.info(
            "Bot round fid=%s: %s vs %s -> %s",
            action.identity,
            player_move,
            bot_move,
            outcome,
        )
        return self._screen(
            Screen.BOT_RESULT,
            title=f"Bot chose {bot_move}. {BOT_OUTCOME_TITLES[outcome]}",
            image="result",
            buttons=[
                ButtonSpec(label="Play Again"),
                ButtonSpec(label="Create PvP"),
                ButtonSpec(label="How to Play"),
                ButtonSpec(label="Connect Wallet"),
            ],
            post_url=self._url("/action"),
        )

    def play_pvp(self, action: VerifiedAction) -> ScreenDescriptor:
        """Tap on any screen of a PvP match (lobby, invite, waiting)."""
        try:
            return self._advance_match(action)
        except MatchNotFoundError as exc:
            logger.info("PvP tap by fid=%s on unknown match: %s", action.identity, exc)
            return self.match_not_found()

    def match_not_found(self) -> ScreenDescriptor:
        return self._screen(
            Screen.ERROR,
            title="PvP Match Not Found",
            image="error",
            buttons=[ButtonSpec(label="Home")],
            post_url=self._url("/"),
        )

    def purge_expired(self) -> int:
        """Remove abandoned matches older than the configured TTL. Returns the number of removed matches."""
        ttl = self.settings.match_ttl_seconds
        if ttl <= 0:
            return 0
        now = self.clock()
        removed = 0
        for match_id in self.repo.expired_match_ids(now - timedelta(seconds=ttl)):
            with self.locks.hold(match_id):
                stored = self.repo.get_match(match_id)
                if stored and Match.from_model(stored).is_expired(now, ttl):
                    self.repo.delete_match(match_id)
                    removed += 1
        if removed:
            logger.info("Purged %d expired match(es)", removed)
        return removed

    # -- Internal helpers --
    def _advance_match(self, action: VerifiedAction) -> ScreenDescriptor:
        """
        One read-modify-write step of a match, atomic per match id.
        ----
        1. bind the caller as opponent if the seat is free (never the initiator)
        2. record the tapped move for the caller's role, unless already recorded
        3. still incomplete? store and show the matching waiting screen
        4. complete? remove from the store (inside the same lock) and show the result
        """
        match_id = self._require_match_id(action.query.get(MATCH_ID_PARAM))
        with self.locks.hold(match_id):
            match = self._fetch_match(match_id)

            changed = match.register_player(action.identity)
            if changed:
                logger.info("Match %s joined by fid=%s", match_id, action.identity)

            if is_move_button(action.button_index):
                move = move_from_button(action.button_index)
                if match.submit_move(action.identity, move):
                    changed = True
                    logger.info("Match %s: fid=%s played", match_id, action.identity)

            if match.status != MatchStatus.COMPLETE:
                if changed and self.repo.update_match(match_id, match.to_model()) is None:
                    raise MatchNotFoundError(f"Match with {match_id=} vanished.")
                return self._waiting_screen(match_id, match.status)

            self.repo.delete_match(match_id)

        logger.info(
            "Match %s resolved: %s (%s) vs %s (%s) -> %s",
            match_id,
            match.initiator,
            match.initiator_move,
            match.opponent,
            match.opponent_move,
            match.outcome,
        )
        return self._pvp_result_screen(match)

    def _waiting_screen(self, match_id: str, status: MatchStatus) -> ScreenDescriptor:
        title = (
            "Waiting for opponent"
            if status == MatchStatus.WAITING_FOR_OPPONENT
            else "Waiting for both moves"
        )
        return self._screen(
            Screen.WAITING,
            title=title,
            image="lobby",
            buttons=[*MOVE_BUTTONS, ButtonSpec(label="Refresh")],
            post_url=self._match_url(match_id),
        )

    def _pvp_result_screen(self, match: Match) -> ScreenDescriptor:
        winner = match.winner
        title = "Draw!" if winner is None else f"Player {winner} wins!"
        return self._screen(
            Screen.PVP_RESULT,
            title=title,
            image="result",
            buttons=[
                ButtonSpec(label="Play Bot"),
                ButtonSpec(label="Rematch"),
                ButtonSpec(label="How to Play"),
                ButtonSpec(label="Connect Wallet"),
            ],
            post_url=self._url("/action"),
        )

    def _fetch_match(self, match_id: str) -> Match:
        """Attempt to find a live match in the repository and raise error if it fails. Caller holds the match lock."""
        stored = self.repo.get_match(match_id)
        if stored is None:
            raise MatchNotFoundError(f"Match with {match_id=} not found.")
        match = Match.from_model(stored)
        if match.is_expired(self.clock(), self.settings.match_ttl_seconds):
            self.repo.delete_match(match_id)
            raise MatchNotFoundError(f"Match with {match_id=} expired.")
        return match

    def _require_match_id(self, match_id: Optional[str]) -> str:
        if not match_id:
            raise MatchNotFoundError("No matchId in callback URL.")
        return match_id

    def _home_buttons(self) -> list[ButtonSpec]:
        return [
            ButtonSpec(label="Play Bot"),
            ButtonSpec(label="Create PvP"),
            ButtonSpec(label="How to Play"),
            ButtonSpec(label="Connect Wallet"),
        ]

    def _screen(
        self,
        screen: Screen,
        title: str,
        image: str,
        buttons: list[ButtonSpec],
        post_url: str,
    ) -> ScreenDescriptor:
        logger.debug("Rendering %s screen", screen)
        return ScreenDescriptor(
            title=title,
            image=self._url(f"/images/{image}.png"),
            buttons=buttons,
            post_url=post_url,
        )

    def _match_url(self, match_id: str) -> str:
        return self._url("/pvp", **{MATCH_ID_PARAM: match_id})

    def _url(self, path: str, **query: str) -> str:
        url = f"{self.settings.base_url}{path}"
        if query:
            url = f"{url}?{urlencode(query)}"
        return url
