"""One fixed-order simulation step over an explicit session."""

from simulation import events
from simulation.collisions import resolve_collections, resolve_obstacle_hits, resolve_power_up_pickups
from simulation.entities import ForceField

LEVEL_BONUS = 100


class TickResult:
    __slots__ = ("events", "level_completed", "exhausted", "destroyed", "pruned")

    def __init__(self, events, level_completed=False, exhausted=False, destroyed=0, pruned=0):
        self.events = events
        self.level_completed = level_completed
        self.exhausted = exhausted
        self.destroyed = destroyed
        self.pruned = pruned


def run_tick(session, paths, now_ms):
    """Advance ``session`` by one tick.

    Order: emit and integrate every particle, resolve obstacle, collection and
    power-up collisions, prune, animate, expire power-ups, maybe spawn one,
    then evaluate level completion and exhaustion.
    """
    out = []
    effects = session.effects
    world = session.world

    field = ForceField(paths, session.obstacles, session.collection_points,
                       magnet=effects.magnet, time_slow=effects.time_slow)
    for emitter in session.emitters:
        emitter.emit()
        emitter.update(field)
    for particle in session.strays:
        particle.update(field)

    particles = session.particles()
    destroyed = resolve_obstacle_hits(particles, session.obstacles, shield=effects.shield)

    for gain in resolve_collections(particles, session.collection_points, multiplier=effects.multiplier):
        session.score += gain
        out.append(events.event(events.COLLECTED, value=gain, score=session.score))

    for power_up_type, duration in resolve_power_up_pickups(particles, session.power_ups):
        effects.activate(power_up_type, duration, now_ms)
        out.append(events.event(events.POWER_UP_ACQUIRED, type=power_up_type.key, duration=duration))

    pruned = session.prune_strays()
    pruned += sum(emitter.prune(world.width, world.height) for emitter in session.emitters)

    for obstacle in session.obstacles:
        obstacle.update()
    for point in session.collection_points:
        point.update()
    for power_up in session.power_ups:
        power_up.update()
    session.power_ups = [p for p in session.power_ups if p.active and not p.collected]

    for power_up_type in effects.update(now_ms):
        out.append(events.event(events.POWER_UP_EXPIRED, type=power_up_type.key))

    if session.rng.random() < session.difficulty.power_up_chance:
        power_up = session.generator.spawn_power_up(session.level, world.width, world.height, session.emitters,
                                                    session.obstacles, session.collection_points)
        if power_up is not None:
            session.power_ups.append(power_up)

    session.tick += 1
    session.level_ticks += 1

    if session.level_complete:
        out.extend(advance_level(session))
        return TickResult(out, level_completed=True, destroyed=destroyed, pruned=pruned)

    return TickResult(out, exhausted=session.exhausted, destroyed=destroyed, pruned=pruned)


def advance_level(session):
    """Move to the next level in place: harder, fresh layout, bonus score."""
    session.level += 1
    session.difficulty.advance()
    layout = session.generate_level()
    session.score += LEVEL_BONUS * session.level

    out = [events.event(events.LEVEL_COMPLETE, level=session.level, score=session.score)]
    if layout.underfilled:
        out.append(events.event(events.LAYOUT_UNDERFILLED, level=session.level, **layout.shortfall()))
    return out
