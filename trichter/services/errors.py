from uuid import UUID


class RunNotFoundError(LookupError):
    def __init__(self, run_id: UUID) -> None:
        super().__init__(f"Run '{run_id}' not found")
        self.run_id = run_id
