"""Static rubric catalog: performance titles, level descriptions and colors."""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

PERFORMANCE_TITLES: Mapping[str, str] = MappingProxyType({
    "performance1": "Involucra activamente a los estudiantes en el proceso de aprendizaje",
    "performance2": "Promueve el razonamiento, la creatividad y/o el pensamiento crítico",
    "performance3": "Evalúa el progreso de los aprendizajes para retroalimentar",
    "performance4": "Propicia un ambiente de respeto y proximidad",
    "performance5": "Regula positivamente el comportamiento de los estudiantes",
    "performance6": "Uso de ayudas tecnológicas para la enseñanza aprendizaje",
})

PERFORMANCE_DESCRIPTIONS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "performance1": MappingProxyType({
        "I": "El docente ofrece muy poca oportunidad de participación del estudiante, dictando solo las diapositivas.",
        "II": "El docente explica las diapositivas resaltando con un lápiz digital, involucrando a los estudiantes a través del chat",
        "III": "El docente involucra a la gran mayoría de los estudiantes en el aprendizaje y expone con ayudas gráficas, las diapositivas.",
        "IV": "El docente involucra activamente a casi todos los estudiantes, preguntando personalizadamente, al azar. Expone con ayuda de graficadores, las diapositivas.",
    }),
    "performance2": MappingProxyType({
        "I": "El docente propone actividades o establece interacciones que estimulan únicamente el aprendizaje reproductivo memorístico.",
        "II": "El docente intenta promover el razonamiento, la creatividad y/o el pensamiento crítico al menos en una ocasión, pero no lo logra.",
        "III": "El docente promueve efectivamente el razonamiento, la creatividad y/o el pensamiento crítico al menos en una ocasión.",
        "IV": "El docente promueve efectivamente el razonamiento, la creatividad y/o el pensamiento crítico en la sesión, en su conjunto.",
    }),
    "performance3": MappingProxyType({
        "I": "El docente no monitorea, o ante las respuestas de los estudiantes, el docente da retroalimentación incorrecta o no da retroalimentación.",
        "II": "El docente monitorea activamente a los estudiantes, pero solo les brinda retroalimentación elemental.",
        "III": "El docente monitorea activamente a los estudiantes, y les brinda retroalimentación descriptiva.",
        "IV": "El docente monitorea activamente a los estudiantes y les brinda -al menos en una ocasión, en la sesión, retroalimentación por descubrimiento o reflexión.",
    }),
    "performance4": MappingProxyType({
        "I": "Si hay faltas de respeto entre los estudiantes, el docente no interviene (o ignora el hecho). O el docente, en alguna ocasión, falta el respeto a uno o más estudiantes.",
        "II": "El docente es siempre respetuoso con los estudiantes, aunque frío o distante. Además, interviene si nota faltas de respeto al docente.",
        "III": "El docente es siempre respetuoso con los estudiantes, es cordial y les transmite calidez. Siempre se muestra empático con sus necesidades.",
        "IV": "El docente es siempre respetuoso con los estudiantes y muestra consideración hacia sus perspectivas. Es cordial con ellos y les transmite calidez. Siempre es empático.",
    }),
    "performance5": MappingProxyType({
        "I": "Para prevenir o controlar el comportamiento inapropiado en el aula, el docente utiliza predominantemente mecanismos de control externo -negativos.",
        "II": "El docente utiliza predominantemente mecanismos formativos y nunca de maltrato para regular el comportamiento de los estudiantes, pero es poco eficaz.",
        "III": "El docente utiliza predominantemente mecanismos formativos -positivos- y nunca de maltrato para regular el comportamiento de los estudiantes de manera eficaz.",
        "IV": "El docente siempre utiliza mecanismos formativos -positivos- para regular el comportamiento de los estudiantes de manera eficaz.",
    }),
    "performance6": MappingProxyType({
        "I": "El docente no añade tecnologías o muros de interacción con sus estudiantes, no permitiendo de esta manera la participación de sus estudiantes.",
        "II": "El docente utiliza al menos alguna tecnología como muros Padlet, en una ocación, para interactuar con sus estudiantes a través de la virtualidad.",
        "III": "El docente trabaja con pizarras interactivas para permitir la mayor participación de estudiantes, usando los muros de interacción Padlet, al menos más de una ocación.",
        "IV": "El docente siempre utiliza pizarras interactivas y hace que sus estudiantes constantemente envíen respuestas a través de muros de participación cuando les pregunta.",
    }),
})

LEVEL_COLORS: Mapping[str, str] = MappingProxyType({
    "IV": "2E7D32",  # dark green
    "III": "1976D2",  # blue
    "II": "F57C00",  # orange
    "I": "D32F2F",  # red
})

DEFAULT_LEVEL_COLOR = "757575"


def level_color(level: str) -> str:
    """Hex fill color for a rating badge."""
    return LEVEL_COLORS.get(level, DEFAULT_LEVEL_COLOR)


def performance_description(performance: str, level: str) -> str:
    """Catalog text for ``level`` in the given slot, or an empty string."""
    return PERFORMANCE_DESCRIPTIONS.get(performance, {}).get(level, "")
