GENERATE_STAGES = [
    ("load_config", "Load config"),
    ("discover_charts", "Discover charts"),
    ("synthesize", "Synthesize schemas"),
    ("link_dependencies", "Link dependencies"),
    ("write_output", "Write output"),
]


STAGE_LABELS = {stage_id: label for stage_id, label in GENERATE_STAGES}
