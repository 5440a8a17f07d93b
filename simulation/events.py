"""Discrete notifications for the audio and UI collaborators."""

STARTED = "started"
PAUSED = "paused"
RESUMED = "resumed"
COLLECTED = "collected"
POWER_UP_ACQUIRED = "power_up_acquired"
POWER_UP_EXPIRED = "power_up_expired"
LEVEL_COMPLETE = "level_complete"
LAYOUT_UNDERFILLED = "layout_underfilled"
GAME_OVER = "game_over"

SOUND_CUES = {
    COLLECTED: "collect",
    POWER_UP_ACQUIRED: "powerup",
}


def event(kind, **data):
    return {"kind": kind, **data}


def with_sound(events, enabled):
    """Attach the sound cue to events that have one, when sound is on."""
    if not enabled:
        return events
    for item in events:
        cue = SOUND_CUES.get(item["kind"])
        if cue:
            item["sound"] = cue
    return events
