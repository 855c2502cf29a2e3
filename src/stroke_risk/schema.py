"""Column layout of the stroke prediction dataset."""

ID_COL = "id"
TARGET_COL = "stroke"

CATEGORICAL_COLS = [
    "gender",
    "ever_married",
    "work_type",
    "Residence_type",
    "smoking_status",
]
NUMERIC_COLS = ["age", "avg_glucose_level", "bmi"]
FLAG_COLS = ["hypertension", "heart_disease"]

FEATURE_COLS = [
    "gender",
    "age",
    "hypertension",
    "heart_disease",
    "ever_married",
    "work_type",
    "Residence_type",
    "avg_glucose_level",
    "bmi",
    "smoking_status",
]
REQUIRED_COLS = [ID_COL] + FEATURE_COLS + [TARGET_COL]

# Subset used by the reduced logistic model
REDUCED_FEATURE_COLS = [
    "age",
    "hypertension",
    "heart_disease",
    "avg_glucose_level",
    "smoking_status",
]

MISSING_MARKER = "N/A"
UNKNOWN_SMOKING = "Unknown"
RETAINED_GENDERS = ("Male", "Female")
