from pydantic import BaseModel

class OnboardingState(BaseModel):
    hasSeenTour: bool = False
    tourStep: int = 0
    isTourOpen: bool = False
    isHelpOpen: bool = False

class OnboardingPatch(BaseModel):
    hasSeenTour: bool | None = None
    tourStep: int | None = None
    isTourOpen: bool | None = None
    isHelpOpen: bool | None = None
