"""
Wind-radii model.

R34/R50/R64 (km) relax toward intensity-derived targets instead of
snapping, so the wind field grows and shrinks smoothly with the storm.
"""

RADII_TRANSITION_RATE = 0.1


def target_wind_radii(intensity, circulation_size, rmw):
    """
    Target (r34, r50, r64) in km for the given intensity and RMW.

    Storms at or below 34 kt have no gale radius; R50/R64 are zero until
    the storm exceeds those thresholds.
    """
    if intensity <= 34:
        return 0.0, 0.0, 0.0
    r34 = circulation_size * ((intensity - 24) / (rmw * 0.6))
    r50 = r34 * max(0.0, (intensity - 50) / rmw)
    r64 = r34 * max(0.0, (intensity - 64) / rmw)
    return r34, r50, r64


def update_wind_radii(cyclone, rng, rate=RADII_TRANSITION_RATE):
    """Smooth the cyclone's radii toward this tick's targets. Mutates cyclone."""
    rmw = cyclone.intensity * (0.75 + rng.random_sample())
    target_r34, target_r50, target_r64 = target_wind_radii(
        cyclone.intensity, cyclone.circulation_size, rmw)

    cyclone.r34 += (target_r34 - cyclone.r34) * rate
    cyclone.r50 += (target_r50 - cyclone.r50) * rate
    cyclone.r64 += (target_r64 - cyclone.r64) * rate
    return cyclone
