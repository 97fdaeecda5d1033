"""Prompt rendering service using Jinja2.

Prompts for the generative AI service are Jinja2 templates rendered with
StrictUndefined so a missing variable fails loudly instead of sending a
half-empty prompt.
"""

from typing import Optional

from jinja2 import Environment, BaseLoader, StrictUndefined, TemplateError

from pulse.logging_config import get_logger

logger = get_logger(__name__)


INSIGHT_PROMPT = """\
Eres un consultor de Recursos Humanos y Psicólogo Organizacional Senior (Agente IA).
Analiza los datos del usuario.

Puntajes actuales (1-5): {{ latest_scores | tojson }}
Tendencia (Total histórico): {{ history_totals | join(' -> ') }}

Genera una respuesta con 3 secciones claras en ESPAÑOL, formateadas en Markdown simple:

1. **Análisis Personal:** Breve estado del bienestar del empleado (tono empático).
2. **Riesgos Latentes:** ¿Hay peligro de burnout o rotación basado en los datos?
3. **Recomendación Estratégica:** Un consejo accionable para que el empleado mejore su situación hoy mismo.

Mantén el texto total bajo {{ max_words }} palabras. Sé directo y profesional.
"""

EXTRACTION_PROMPT = """\
Analiza esta imagen de encuesta. Extrae las respuestas.
Contexto de preguntas:
{% for question in questions -%}
ID: {{ question.id }}, Pregunta: "{{ question.text }}", Tipo: {{ question.type.value }}
{%- if question.options %}, Opciones: {{ question.options | join(', ') }}{% endif %}
{% endfor %}
Las preguntas LIKERT se responden con un número del 1 al 5; las de opción múltiple con el texto exacto de la opción.
Omite las preguntas sin respuesta visible.
Devuelve JSON puro: {"q1": 5, "q2": "Opción A"}
"""


class PromptRenderError(Exception):
    """Raised when prompt rendering fails."""
    pass


class PromptRenderer:
    """Service for rendering Jinja2 prompt templates."""

    def __init__(self):
        """Initialize Jinja2 environment with strict settings."""
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=False,  # Plain-text prompts, not HTML
            undefined=StrictUndefined,  # Raise error on undefined variables
            keep_trailing_newline=True,
        )
        # Keep category order and accented labels readable in JSON output
        self.env.policies["json.dumps_kwargs"] = {"sort_keys": False, "ensure_ascii": False}

    def render(self, template_text: str, context: dict) -> str:
        """Render template with context variables.

        Args:
            template_text: Template string with Jinja2 syntax
            context: Dictionary of variables for template

        Returns:
            Rendered text

        Raises:
            PromptRenderError: If template is invalid or variables are missing

        Example:
            >>> renderer = PromptRenderer()
            >>> renderer.render("Tendencia: {{ totals | join(' -> ') }}", {"totals": [3.1, 3.4]})
            'Tendencia: 3.1 -> 3.4'
        """
        try:
            template = self.env.from_string(template_text)
            rendered = template.render(context)
            logger.debug("Rendered prompt successfully")
            return rendered
        except TemplateError as e:
            logger.error(f"Prompt rendering error: {e}")
            raise PromptRenderError(f"Failed to render prompt: {e}")


# Global singleton instance
_renderer_instance: Optional[PromptRenderer] = None


def get_prompt_renderer() -> PromptRenderer:
    """Get global PromptRenderer instance.

    Returns:
        Global PromptRenderer instance
    """
    global _renderer_instance
    if _renderer_instance is None:
        _renderer_instance = PromptRenderer()
    return _renderer_instance
