from dataclasses import dataclass

EXITED = "exited"


@dataclass(frozen=True)
class Container:
    id: str
    state: str       # "running", "exited", "paused", "created", ...
    image_id: str

    @property
    def exited(self) -> bool:
        return self.state == EXITED
