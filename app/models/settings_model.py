# /app/models/settings_model.py

from pydantic import BaseModel, Field, ConfigDict, model_validator

# --- Settings Models ---

class RiskThresholds(BaseModel):
    """
    Risk cutoffs. Scores below `low` are Low risk and scores below `medium`
    are Medium risk; everything else is High. The defaults reproduce the
    fixed 0.3/0.6 bands; with other values "Low iff score < 0.3" no longer
    holds. Saving new thresholds through the settings API re-derives every
    stored student's level from their stored score; stored predictions keep
    the level they were made with.
    """
    low: float = Field(default=0.3, ge=0, le=1)
    medium: float = Field(default=0.6, ge=0, le=1)
    high: float = Field(default=0.8, ge=0, le=1)

    @model_validator(mode="after")
    def thresholds_must_increase(self):
        if not (self.low < self.medium < self.high):
            raise ValueError("Risk thresholds must satisfy low < medium < high.")
        return self

class AlertSettings(BaseModel):
    enableBrowserNotifications: bool = Field(default=True)
    enableEmailAlerts: bool = Field(default=False)
    enableSMSAlerts: bool = Field(default=False)
    autoAcknowledgeAfterHours: int = Field(default=24, ge=0, description="0 disables auto-acknowledgment.")

class ModelSettings(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    autoRetrainThreshold: int = Field(default=50, ge=0, description="New students needed before a retrain is due.")
    currentModelVersion: str = Field(default="1.0.0")

class AppSettings(BaseModel):
    """
    The single process-wide settings record. Services receive it explicitly
    instead of reading it from global state.
    """
    model_config = ConfigDict(from_attributes=True)

    riskThresholds: RiskThresholds = Field(default_factory=RiskThresholds)
    alertSettings: AlertSettings = Field(default_factory=AlertSettings)
    modelSettings: ModelSettings = Field(default_factory=ModelSettings)

class ApiKeyUpdate(BaseModel):
    apiKey: str = Field(..., min_length=1)

class ApiKeyStatus(BaseModel):
    configured: bool
