"""Config schema for the dwarf_colony simulation plugin."""

REQUIRED_PARAMS = {
    "initial_dwarves": int,
}

DEFAULTS = {
    "map_width": 40,
    "map_height": 30,
    "terrain_rows": [],
    "initial_food_sources": 6,
    "food_stock_min": 8,
    "food_stock_max": 13,
    "food_reach": 1,
    "food_respawn_chance": 0.02,
    "hunger_per_tick": 0.12,
    "hunger_seek_threshold": 55.0,
    "hunger_critical_threshold": 80.0,
    "hunger_max": 95.0,
    "eat_hunger_restore": 30.0,
    "lethal_starvation": False,
    "starvation_threshold": 95.0,
    "initial_tasks": 6,
    "max_open_tasks": 20,
    "task_spawn_chance": 0.03,
    "work_amount": 4.0,
    "energy_drain_per_tick": 0.05,
    "rest_energy_threshold": 15.0,
    "rest_energy_gain": 2.0,
    "social_range": 4,
    "meeting_halls": 1,
    "hall_initial_stock": 120.0,
    "hall_capacity": 200.0,
    "hall_stock_regen": 0.05,
    "feast_threshold": 30.0,
    "feast_cooldown": 200,
    "feast_radius": 6,
    "feast_hunger_restore": 40.0,
    "production_yield": 10,
    "population_recovery": True,
    "recovery_cohort_size": 3,
    "recovery_food_sources": 5,
    "recovery_food_stock": 8,
    "spawn_attempts": 50,
    "thought_cooldown": 20,
    "log_capacity": 500,
    "text_provider": "none",
    "text_base_url": "http://localhost:11434",
    "text_model": "llama3.2",
    "text_timeout": 30.0,
    "text_workers": 2,
}

OPTIONAL_PARAMS = {
    "map_width": int,
    "map_height": int,
    "terrain_rows": list,
    "initial_food_sources": int,
    "food_stock_min": int,
    "food_stock_max": int,
    "food_reach": int,
    "food_respawn_chance": float,
    "hunger_per_tick": float,
    "hunger_seek_threshold": float,
    "hunger_critical_threshold": float,
    "hunger_max": float,
    "eat_hunger_restore": float,
    "lethal_starvation": bool,
    "starvation_threshold": float,
    "initial_tasks": int,
    "max_open_tasks": int,
    "task_spawn_chance": float,
    "work_amount": float,
    "energy_drain_per_tick": float,
    "rest_energy_threshold": float,
    "rest_energy_gain": float,
    "social_range": int,
    "meeting_halls": int,
    "hall_initial_stock": float,
    "hall_capacity": float,
    "hall_stock_regen": float,
    "feast_threshold": float,
    "feast_cooldown": int,
    "feast_radius": int,
    "feast_hunger_restore": float,
    "production_yield": int,
    "population_recovery": bool,
    "recovery_cohort_size": int,
    "recovery_food_sources": int,
    "recovery_food_stock": int,
    "spawn_attempts": int,
    "thought_cooldown": int,
    "log_capacity": int,
    "text_provider": str,
    "text_base_url": str,
    "text_model": str,
    "text_timeout": float,
    "text_workers": int,
}
