class HotspotAnalysisError(Exception):
    """Base exception for the hotspot analysis core"""
    pass


class SchemaError(HotspotAnalysisError):
    """Input table is missing columns the pipeline cannot do without"""
    pass


class ModelDegeneracyError(HotspotAnalysisError):
    """A model cannot be fitted meaningfully on the data it was given"""

    def __init__(self, model: str, reason: str):
        self.model = model
        self.reason = reason
        super().__init__(f"{model}: {reason}")
