from math import isnan

from models.geo import GateDecision, LocationError, Perimeter, PositionSample
from utils.geofence import distance_km, is_within


class PerimeterGate:

    @staticmethod
    def evaluate(sample: PositionSample, perimeter: Perimeter) -> GateDecision:
        """Decide whether a clock-in would be permitted for this sample.

        Stateless; the caller keeps the latest decision. A missing or
        untrustworthy position is never treated as inside.
        """
        if isinstance(sample, LocationError):
            return GateDecision(within_perimeter=False, reason=sample.message)

        distance = distance_km(sample, perimeter.center)

        if is_within(sample, perimeter):
            return GateDecision(within_perimeter=True, distance_km=distance)

        if isnan(distance):
            return GateDecision(
                within_perimeter=False,
                reason="Unable to determine distance from the work area.",
            )

        return GateDecision(
            within_perimeter=False,
            reason=(
                f"You are outside the designated work area. You must be within "
                f"{perimeter.radius_km:g}km of the work location to clock in "
                f"(currently {distance:.2f}km away)."
            ),
            distance_km=distance,
        )
