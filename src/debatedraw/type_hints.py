"""Type hints used in Debate Draw."""

from typing import List, Optional, Tuple

TeamId = str

# (proposition team id, opposition team id); opposition None for a bye
PairingTuple = Tuple[TeamId, Optional[TeamId]]
# All pairings for one round, in draw order
RoundSchedule = List[PairingTuple]

#  LocalWords:  PairingTuple RoundSchedule
