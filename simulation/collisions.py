"""Collision and scoring passes, run after every particle has moved."""


def resolve_obstacle_hits(particles, obstacles, shield=False):
    """Deactivate particles inside an obstacle; the first obstacle hit wins.

    Returns the number of particles destroyed. Nothing is destroyed while the
    shield is up.
    """
    if shield:
        return 0
    hits = 0
    for particle in particles:
        if not particle.active:
            continue
        for obstacle in obstacles:
            if obstacle.check_collision(particle.x, particle.y):
                particle.active = False
                hits += 1
                break
    return hits


def resolve_collections(particles, points, multiplier=False):
    """Collect points touched by live particles; returns the score gains in order.

    A particle collects at most one point per tick and survives collecting.
    """
    factor = 2 if multiplier else 1
    gains = []
    for particle in particles:
        if not particle.active:
            continue
        for point in points:
            if point.check_collision(particle.x, particle.y):
                gains.append(point.collect() * factor)
                break
    return gains


def resolve_power_up_pickups(particles, power_ups):
    """Collect power-ups touched by live particles; returns ``(type, duration)`` payloads."""
    payloads = []
    for particle in particles:
        if not particle.active:
            continue
        for power_up in power_ups:
            if power_up.check_collision(particle.x, particle.y):
                payload = power_up.collect()
                if payload is not None:
                    payloads.append(payload)
    return payloads
