"""
Test orchestrator: a linear fallback chain over candidate servers.

States:
  SELECTING  -> ATTEMPTING(0)      candidates were found
  ATTEMPTING(i) -> SUCCEEDED       session i returned a result
  ATTEMPTING(i) -> ATTEMPTING(i+1) session i failed, more candidates left
  ATTEMPTING(i) -> EXHAUSTED       session i failed and was the last one

Each candidate is tried exactly once, in order, with no delay between tries.
"""

import enum
import logging

from .errors import AllAttemptsFailed, MeasurementFailed, NoServersAvailable
from .session import MeasurementSession


class State(enum.Enum):
    SELECTING = "selecting"
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


TERMINAL_STATES = (State.SUCCEEDED, State.EXHAUSTED)


def next_state(state, index, candidate_count, succeeded=False):
    """
    Pure transition function. Returns (state, index).

    `succeeded` only matters while ATTEMPTING.
    """
    if state is State.SELECTING:
        if candidate_count == 0:
            return State.EXHAUSTED, 0
        return State.ATTEMPTING, 0
    if state is State.ATTEMPTING:
        if succeeded:
            return State.SUCCEEDED, index
        if index + 1 < candidate_count:
            return State.ATTEMPTING, index + 1
        return State.EXHAUSTED, index
    raise ValueError(f"no transition out of terminal state {state.value!r}")


class TestOrchestrator:
    __test__ = False

    def __init__(self, catalog, engine, logger=None, session_factory=MeasurementSession):
        self.catalog = catalog
        self.engine = engine
        self.log = logger or logging.getLogger("swifi.orchestrator")
        self.session_factory = session_factory

    def execute(self, config, progress):
        """
        Return the first successful TestResult among the candidates.

        Raises whatever the catalog raises, NoServersAvailable for an empty
        candidate list, and AllAttemptsFailed once every candidate failed.
        """
        candidates = self.catalog.select_for_test(config.server_id)
        if len(candidates) == 0:
            self.log.error("No servers available for testing")
            raise NoServersAvailable()

        attempts = []
        result = None
        state, index = next_state(State.SELECTING, 0, len(candidates))

        while state not in TERMINAL_STATES:
            server = candidates[index]
            session = self.session_factory(server, config.direction, self.engine, logger=self.log)
            try:
                result = session.run(progress)
            except MeasurementFailed as e:
                attempts.append((server, e))
                self.log.error("Error with server %s: %s", server.id, e)
                state, index = next_state(state, index, len(candidates), succeeded=False)
                if state is State.ATTEMPTING:
                    self.log.warning("Trying next server...")
                continue
            state, index = next_state(state, index, len(candidates), succeeded=True)

        if state is State.EXHAUSTED:
            err = AllAttemptsFailed(attempts)
            self.log.error("%s", err)
            raise err
        return result
