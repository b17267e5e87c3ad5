"""Display text for the fixed keys the calculators hand out."""

from __future__ import annotations

from typing import Callable

from config import settings

Translator = Callable[[str], str]

CATALOGS: dict[str, dict[str, str]] = {
    "en": {
        "bmiCalculatorTitle": "BMI Calculator",
        "tdeeCalculatorTitle": "Daily Calorie Calculator",
        "units": "Units",
        "metric": "Metric",
        "imperial": "Imperial",
        "underweight": "Underweight",
        "normalWeight": "Normal weight",
        "overweight": "Overweight",
        "obesity": "Obesity",
        "male": "Male",
        "female": "Female",
        "sedentary": "Sedentary (little or no exercise)",
        "light": "Lightly active (1-3 days/week)",
        "moderate": "Moderately active (3-5 days/week)",
        "active": "Very active (6-7 days/week)",
        "extra": "Extra active (physical job or twice a day)",
        "kg": "kg",
        "lb": "lbs",
        "cm": "cm",
        "ft": "ft",
        "in": "in",
        "kcalPerDay": "calories/day",
        "fillAllFields": "Fill in all fields to see your result.",
    },
    "fr": {
        "bmiCalculatorTitle": "Calculateur d'IMC",
        "tdeeCalculatorTitle": "Calculateur de calories journalières",
        "units": "Unités",
        "metric": "Métrique",
        "imperial": "Impérial",
        "underweight": "Insuffisance pondérale",
        "normalWeight": "Poids normal",
        "overweight": "Surpoids",
        "obesity": "Obésité",
        "male": "Homme",
        "female": "Femme",
        "sedentary": "Sédentaire (peu ou pas d'exercice)",
        "light": "Légèrement actif (1-3 jours/semaine)",
        "moderate": "Modérément actif (3-5 jours/semaine)",
        "active": "Très actif (6-7 jours/semaine)",
        "extra": "Extrêmement actif (travail physique ou deux fois par jour)",
        "kg": "kg",
        "lb": "lb",
        "cm": "cm",
        "ft": "pi",
        "in": "po",
        "kcalPerDay": "calories/jour",
        "fillAllFields": "Remplissez tous les champs pour voir votre résultat.",
    },
}


def resolve_locale(locale: str | None) -> str:
    candidate = (locale or "").strip().lower().split("-")[0]
    if candidate in settings.SUPPORTED_LOCALES and candidate in CATALOGS:
        return candidate
    return settings.DEFAULT_LOCALE


def get_translator(locale: str | None = None) -> Translator:
    catalog = CATALOGS.get(resolve_locale(locale), {})

    def translate(key: str) -> str:
        return catalog.get(key, key)

    return translate
