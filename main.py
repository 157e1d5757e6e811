"""Teen Patti Ledger - scoring and betting server for in-person games."""

import asyncio
import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from teenpatti import GameController, HandEvaluator, HandRank, TeenPattiRules
from teenpatti.exceptions import ActionRejected, InvalidHandSize, UnknownPlayer
from database import init_db, GameStore
from models.schemas import (
    AddPlayerRequest,
    ActionRequest,
    BlindRequest,
    CardModel,
    CardsRequest,
    CompareRequest,
    EvaluateRequest,
    GameResultModel,
    GameStatsModel,
    PlayerInfo,
    RenamePlayerRequest,
    StartGameRequest,
    WinnerRequest,
)
import config

logging.basicConfig(
    level=logging.DEBUG if config.DEBUG else config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Teen Patti Ledger")

# CORS middleware so a browser front end on another origin can call the API
if config.CORS_ALLOW_ALL:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Initialize database
init_db()

# The one table this server keeps score for
session: Optional[GameController] = None

# Serializes state transitions: one action at a time
session_lock = asyncio.Lock()


def table_rules() -> TeenPattiRules:
    return TeenPattiRules(max_players=config.MAX_PLAYERS, boot_amount=config.BOOT_AMOUNT)


def get_session() -> GameController:
    """Get the session controller, loading persisted history on first use."""
    global session
    if session is None:
        session = GameController.load(GameStore, rules=table_rules())
    return session


def rejected(error: ActionRejected) -> HTTPException:
    status_code = 404 if isinstance(error, UnknownPlayer) else 400
    return HTTPException(status_code=status_code, detail=error.to_dict())


def to_cards(cards: List[CardModel]):
    try:
        return [c.to_card() for c in cards]
    except ValueError as e:
        raise HTTPException(status_code=400, detail={'reason': 'invalid_card', 'message': str(e)})


def evaluate_or_reject(cards: List[CardModel]):
    try:
        return HandEvaluator.evaluate(to_cards(cards))
    except InvalidHandSize as e:
        raise HTTPException(status_code=400, detail={'reason': 'invalid_hand_size', 'message': str(e)})


def stats_view(controller: GameController) -> dict:
    stats = controller.stats
    data = stats.to_dict()
    data['favoriteHandName'] = HandRank.name(stats.favorite_hand)
    data['winRate'] = stats.win_rate
    data['netAmount'] = stats.net_amount
    return data


# Startup event
@app.on_event("startup")
async def startup_event():
    """Load persisted history and stats."""
    controller = get_session()
    logger.info(
        "Teen Patti ledger starting on %s:%s (%d games on record)",
        config.HOST, config.PORT, len(controller.state.game_history)
    )


# Game state
@app.get("/api/game")
async def get_game():
    """Get the full table state."""
    return get_session().get_game_state()


@app.post("/api/game/start")
async def start_game(request: StartGameRequest = None):
    """Reset the players and start a new game."""
    request = request or StartGameRequest()
    async with session_lock:
        controller = get_session()
        try:
            controller.start_game(request.boot_amount, request.collect_boot)
        except ActionRejected as e:
            raise rejected(e)
        return controller.get_game_state()


@app.post("/api/game/actions")
async def submit_action(request: ActionRequest):
    """Apply a player's action."""
    async with session_lock:
        controller = get_session()
        result = controller.process_action(request.to_action())
        if not result['success']:
            status_code = 404 if result['reason'] == UnknownPlayer.reason else 400
            raise HTTPException(
                status_code=status_code,
                detail={'reason': result['reason'], 'message': result['error']}
            )
        return {'success': True, 'state': controller.get_game_state()}


@app.post("/api/game/winner")
async def declare_winner(request: WinnerRequest):
    """Declare the winner, settle the pot and record the result."""
    async with session_lock:
        controller = get_session()
        try:
            result = controller.declare_winner(request.player_id)
        except ActionRejected as e:
            raise rejected(e)
        return {
            'result': result.to_dict(),
            'final_winnings': controller.final_winnings(),
            'state': controller.get_game_state()
        }


@app.post("/api/game/round")
async def new_round():
    """Start the next betting round of the current game."""
    async with session_lock:
        controller = get_session()
        try:
            controller.new_round()
        except ActionRejected as e:
            raise rejected(e)
        return controller.get_game_state()


@app.post("/api/game/end")
async def end_game():
    """End the current game without a winner."""
    async with session_lock:
        controller = get_session()
        controller.end_game()
        return controller.get_game_state()


@app.get("/api/game/winnings")
async def get_final_winnings():
    """Players ranked by net profit."""
    return get_session().final_winnings()


# Players
@app.post("/api/players", response_model=PlayerInfo)
async def add_player(request: AddPlayerRequest):
    """Add a player before the game starts."""
    async with session_lock:
        controller = get_session()
        balance = config.INITIAL_BALANCE if request.initial_balance is None else request.initial_balance
        try:
            player = controller.add_player(request.name, balance, request.is_blind)
        except ActionRejected as e:
            raise rejected(e)
        return PlayerInfo(**player.to_dict())


@app.delete("/api/players/{player_id}")
async def remove_player(player_id: str):
    """Remove a player before the game starts."""
    async with session_lock:
        controller = get_session()
        try:
            controller.remove_player(player_id)
        except ActionRejected as e:
            raise rejected(e)
        return {'success': True}


@app.put("/api/players/{player_id}/name", response_model=PlayerInfo)
async def rename_player(player_id: str, request: RenamePlayerRequest):
    async with session_lock:
        controller = get_session()
        try:
            controller.rename_player(player_id, request.name)
        except ActionRejected as e:
            raise rejected(e)
        return PlayerInfo(**controller.state.get_player(player_id).to_dict())


@app.put("/api/players/{player_id}/blind", response_model=PlayerInfo)
async def set_blind(player_id: str, request: BlindRequest):
    """Mark a player as playing blind (or not)."""
    async with session_lock:
        controller = get_session()
        try:
            player = controller.set_blind(player_id, request.is_blind)
        except ActionRejected as e:
            raise rejected(e)
        return PlayerInfo(**player.to_dict())


@app.put("/api/players/{player_id}/cards", response_model=PlayerInfo)
async def set_cards(player_id: str, request: CardsRequest):
    """Record the physical cards a player holds."""
    cards = to_cards(request.cards)
    async with session_lock:
        controller = get_session()
        try:
            player = controller.set_cards(player_id, cards)
        except ActionRejected as e:
            raise rejected(e)
        except InvalidHandSize as e:
            raise HTTPException(status_code=400, detail={'reason': 'invalid_hand_size', 'message': str(e)})
        return PlayerInfo(**player.to_dict())


@app.get("/api/players/{player_id}/hand")
async def get_player_hand(player_id: str):
    """Evaluate a player's recorded cards."""
    try:
        evaluation = get_session().evaluate_player(player_id)
    except ActionRejected as e:
        raise rejected(e)
    if evaluation is None:
        raise HTTPException(status_code=404, detail={'reason': 'no_cards', 'message': 'No cards recorded'})
    return evaluation.to_dict()


# Hands
@app.post("/api/hands/evaluate")
async def evaluate_hand(request: EvaluateRequest):
    """Evaluate any 3 cards."""
    return evaluate_or_reject(request.cards).to_dict()


@app.post("/api/hands/compare")
async def compare_hands(request: CompareRequest):
    """Compare two hands; winner is 'first', 'second' or 'tie'."""
    first = evaluate_or_reject(request.first)
    second = evaluate_or_reject(request.second)
    outcome = HandEvaluator.compare_hands(first, second)
    winner = 'first' if outcome > 0 else 'second' if outcome < 0 else 'tie'
    return {'winner': winner, 'first': first.to_dict(), 'second': second.to_dict()}


# History and statistics
@app.get("/api/history", response_model=List[GameResultModel])
async def get_history(limit: int = 50):
    """Most recent settled games, newest first."""
    history = get_session().state.game_history
    return [r.to_dict() for r in reversed(history[-limit:])] if limit > 0 else []


@app.get("/api/stats", response_model=GameStatsModel)
async def get_stats():
    """Aggregate statistics over every settled game."""
    return stats_view(get_session())


@app.delete("/api/history")
async def reset_history():
    """Forget all settled games and statistics."""
    async with session_lock:
        get_session().reset_history()
        return {'success': True}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    controller = get_session()
    return {"status": "healthy", "players": len(controller.state.players)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
