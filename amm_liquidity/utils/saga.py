"""Multi-step wallet operations with compensating rollback.

An approve -> swap -> deposit sequence is three separate transactions. If a
later one fails the earlier ones have already landed, so each step may
register a compensation that undoes it. Compensations run newest first and
the original failure is always re-raised afterwards.
"""

import structlog

logger = structlog.get_logger()


class SagaStep:
    """One named action and its optional compensation"""

    def __init__(self, name, action, compensation=None):
        """
        Args:
            name: Step label (used as result key and in logs)
            action: Callable taking no arguments; its return value is the step result
            compensation: Callable receiving the step result, undoes the action
        """
        self.name = name
        self.action = action
        self.compensation = compensation


class TransactionSaga:
    """Ordered steps executed all-or-compensated"""

    def __init__(self, name):
        self.name = name
        self.steps = []
        self.compensation_errors = []

    def add_step(self, name, action, compensation=None):
        """Append a step. Returns self for chaining."""
        self.steps.append(SagaStep(name, action, compensation))
        return self

    def run(self):
        """
        Execute all steps in order.

        Returns:
            Dict of step name -> action result

        Raises:
            The first step's exception, after compensating completed steps
        """
        results = {}
        completed = []

        for step in self.steps:
            try:
                results[step.name] = step.action()
            except Exception as e:
                logger.error(
                    "saga_step_failed",
                    saga=self.name,
                    step=step.name,
                    completed=[s.name for s, _ in completed],
                    error=str(e),
                )
                self._compensate(completed)
                raise
            completed.append((step, results[step.name]))

        logger.info("saga_completed", saga=self.name, steps=[s.name for s in self.steps])
        return results

    def _compensate(self, completed):
        for step, result in reversed(completed):
            if step.compensation is None:
                continue
            logger.warning("saga_compensating", saga=self.name, step=step.name)
            try:
                step.compensation(result)
            except Exception as e:
                # Original failure is what the caller sees
                self.compensation_errors.append((step.name, e))
                logger.exception(
                    "saga_compensation_failed", saga=self.name, step=step.name
                )
