
import os

CONFIG = {
    # Board
    "ROWS": 16,
    "COLS": 10,
    "CELL_SIZE": 40,
    "CELL_MARGIN": 3,
    "TARGET_SUM": 10,

    # Clock
    "START_TIME_S": 60,
    "COUNTDOWN_MS": 2000,
    "COUNTDOWN_BEAT_MS": 1000,
    "MATCH_TIME_BONUS_S": 3,

    # Scoring
    "BASE_POINTS_PER_TILE": 100,
    "SIZE_MULT_FROM": 2,          # multiplier doubles for every tile beyond this
    "COMBO_WINDOW_MS": 3000,
    "COMBO_MIN": 2,
    "COMBO_BONUS_STEP": 50,
    "COMBO_MILESTONE_EVERY": 5,
    "MAX_MATCH_POINTS": 50000,
    "PERFECT_CLEAR_MULT": 2,

    # Reward ladder
    "REWARD_FIRST_SCORE": 5000,
    "REWARD_FIRST_GAP": 5000,
    "REWARD_GAP_GROWTH": 2500,
    "REWARD_TIME_S": 10,
    "REWARD_HINT_CHARGES": 1,

    # Abilities
    "HINT_CHARGES": 1,
    "SHUFFLE_CHARGES": 1,
    "HINT_MS": 10000,
    "FREEZE_MS": 5000,
    "SHUFFLE_ATTEMPTS": 20,
    "GENERATE_ATTEMPTS": 20,

    # Tile supply
    "BAG_POLICY": "weighted",     # "weighted" | "uniform"
    "BAG_WEIGHTS": {1: 4, 2: 4, 3: 4, 4: 4, 5: 3, 6: 3, 7: 2, 8: 2, 9: 2},
    "INITIAL_FILL": "pairs",      # "pairs" | "bag"
    "DEFER_REFILL_DURING_COMBO": True,
    "FALL_SPEED_ROWS_PER_S": 12.0,
    "SEED": None,

    # Player / transport
    "NAME_MAX_LEN": 12,
    "LEADERBOARD_URL": os.environ.get("MAKE10_LEADERBOARD_URL", "http://127.0.0.1:5000/make10"),
    "UPLOAD_SECRET": os.environ.get("MAKE10_UPLOAD_SECRET", "make10-dev-salt"),
    "UPLOAD_TIMEOUT_S": 10,
    "LEADERBOARD_SIZE": 10,

    # Presentation
    "BGM_VOLUME": 0.5,
    "SFX_VOLUME": 0.5,
    "BOSS_BASE_HP": 3000,
    "BOSS_RESPAWN_MS": 1500,
    "FPS": 60,
}


def session_config(**overrides) -> dict:
    """Copy of CONFIG with overrides applied; sessions never read CONFIG live."""
    cfg = dict(CONFIG)
    cfg["BAG_WEIGHTS"] = dict(CONFIG["BAG_WEIGHTS"])
    cfg.update(overrides)
    return cfg
