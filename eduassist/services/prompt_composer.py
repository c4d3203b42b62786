"""System-instruction assembly for assistant chats.

The instruction is plain string concatenation driven only by the assistant
configuration, the knowledge corpus, the prior turns and the per-turn mode
flags. Optional paragraphs live in an ordered table of
(predicate, builder) pairs so adding a mode is a one-line change.
"""
from typing import Callable, List, Optional, Sequence, Tuple

from eduassist.domain.assistant import AssistantConfig, KnowledgeSnippet
from eduassist.domain.chat import ChatTurn, ModeFlags

# Markers the postprocessor looks for in replies
CITATION_FORMAT = "(Fonte: <nome do material>)"
REASONING_HEADING = "🧠 Como cheguei a esta resposta:"
REVIEW_TOPIC_MARKER = "[TÓPICO_REVISÃO: <nome do conceito>]"

GUARDIAN_REFUSAL = "Não encontrei essa informação no material fornecido."

GUARDIAN_MAX_LEVEL = 30
BALANCED_MAX_LEVEL = 70

GUARDIAN_TIER = "guardian"
BALANCED_TIER = "balanced"
CREATIVE_TIER = "creative_partner"

SECTION_SEPARATOR = "\n\n"


def _guardian_block(config: AssistantConfig) -> str:
    return (
        "MODO GUARDIÃO DO CONTEÚDO: Responda exclusivamente com base no conhecimento "
        "fornecido abaixo. Não use conhecimento externo, não invente fatos e não faça "
        "suposições. Se a informação não estiver no material, responda exatamente: "
        f"\"{GUARDIAN_REFUSAL}\" Sempre indique de qual material veio cada informação."
    )


def _balanced_block(config: AssistantConfig) -> str:
    return (
        "MODO EQUILIBRADO: Use principalmente o conhecimento fornecido abaixo. Você pode "
        "criar analogias simples e exemplos baseados no conteúdo para facilitar a "
        "compreensão, sem contradizer o material."
    )


def _creative_block(config: AssistantConfig) -> str:
    return (
        "MODO PARCEIRO CRIATIVO: Você pode criar analogias criativas, exemplos novos e "
        "conectar ideias usando conhecimento geral para enriquecer o aprendizado, "
        f"mantendo sempre a precisão em {config.subject}."
    )


TIER_BLOCKS = {
    GUARDIAN_TIER: _guardian_block,
    BALANCED_TIER: _balanced_block,
    CREATIVE_TIER: _creative_block,
}

PERSONALITY_SENTENCES = {
    "friendly": "Use um tom amigável, acolhedor e encorajador, como um colega que adora ensinar.",
    "formal": "Use um tom formal, preciso e objetivo, com linguagem acadêmica.",
    "socratic": (
        "Use o método socrático: em vez de entregar a resposta pronta, faça perguntas "
        "que levem o aluno a raciocinar e chegar à conclusão por conta própria."
    ),
    "creative": "Use um tom criativo e envolvente, com histórias, metáforas e exemplos inesperados.",
}

PRACTICE_BLOCK = (
    "MODO PRÁTICA: Gere exercícios práticos sobre o tema pedido, em ordem crescente de "
    "dificuldade. Apresente um exercício por vez, aguarde a resposta do aluno e só então "
    "dê o feedback e a correção comentada."
)

ACTIVITY_BLOCK = (
    "GERAÇÃO DE ATIVIDADE: Crie uma atividade educacional completa para o educador, com "
    "objetivo de aprendizagem, materiais necessários, passo a passo, tempo estimado e "
    "critérios de avaliação."
)

COMMAND_BLOCK = (
    "COMANDOS ESPECIAIS: A mensagem do aluno é um comando. Responda à ação pedida de forma "
    "direta e estruturada: /simular cria uma simulação guiada, /conectar relaciona o "
    "conceito com o cotidiano, /criar_plano monta um plano de estudos, /segunda_mente "
    "organiza as anotações do aluno e /mapa gera um mapa mental em tópicos."
)

SIMULATION_BLOCK = (
    "MODO SIMULAÇÃO: Conduza uma simulação interativa do fenômeno ou processo pedido. "
    "Descreva o cenário inicial, proponha variáveis que o aluno pode alterar e explique "
    "passo a passo o que acontece em cada mudança."
)

LIFE_CONNECTION_BLOCK = (
    "CONEXÃO COM A VIDA REAL: Relacione o conceito com situações do cotidiano do aluno, "
    "profissões e aplicações atuais. Dê pelo menos três exemplos concretos e termine com "
    "uma pergunta de reflexão."
)

STUDY_PLAN_BLOCK = (
    "PLANO DE ESTUDOS: Monte um plano de estudos semanal com metas claras, tempo por "
    "sessão, técnicas de estudo recomendadas (revisão espaçada, prática ativa) e marcos "
    "de revisão."
)

ANTI_CHEAT_BLOCK = (
    "ANTI-COLA: Se a pergunta parecer uma questão de prova, tarefa ou avaliação copiada, "
    "não entregue a resposta final. Explique os conceitos envolvidos, dê pistas e guie o "
    "aluno para que ele resolva sozinho."
)

REVIEW_TAG_BLOCK = (
    "REVISÃO ESPAÇADA: Se a resposta abordar um conceito importante que o aluno deve "
    f"revisar depois, inclua ao final a marcação {REVIEW_TOPIC_MARKER} com o nome curto "
    "do conceito. Use no máximo uma marcação por resposta."
)

Predicate = Callable[[AssistantConfig, ModeFlags], bool]
Builder = Callable[[AssistantConfig], str]

# Order matters: blocks are appended in this sequence
CONDITIONAL_BLOCKS: List[Tuple[str, Predicate, Builder]] = [
    (
        "citation",
        lambda config, modes: config.citation_mode,
        lambda config: (
            "CITAÇÃO DE FONTES: Sempre que usar uma informação do conhecimento fornecido, "
            f"cite a fonte logo em seguida no formato {CITATION_FORMAT}."
        ),
    ),
    (
        "transparency",
        lambda config, modes: config.transparency_mode,
        lambda config: (
            "TRANSPARÊNCIA: Ao final da resposta, explique como chegou a ela em um bloco "
            f"iniciado por \"{REASONING_HEADING}\" seguido de uma explicação curta, em um "
            "único parágrafo."
        ),
    ),
    ("practice", lambda config, modes: modes.practice, lambda config: PRACTICE_BLOCK),
    ("activity", lambda config, modes: modes.activity_generation, lambda config: ACTIVITY_BLOCK),
    ("command", lambda config, modes: modes.command, lambda config: COMMAND_BLOCK),
    ("simulation", lambda config, modes: modes.simulation, lambda config: SIMULATION_BLOCK),
    ("life_connection", lambda config, modes: modes.life_connection, lambda config: LIFE_CONNECTION_BLOCK),
    ("study_planning", lambda config, modes: modes.study_planning, lambda config: STUDY_PLAN_BLOCK),
    ("anti_cheat", lambda config, modes: config.anti_cheat_mode, lambda config: ANTI_CHEAT_BLOCK),
]


def select_tier(creativity_level: int) -> str:
    """Map a 0-100 creativity level to its tier name."""
    if creativity_level <= GUARDIAN_MAX_LEVEL:
        return GUARDIAN_TIER
    if creativity_level <= BALANCED_MAX_LEVEL:
        return BALANCED_TIER
    return CREATIVE_TIER


def _identity(config: AssistantConfig) -> str:
    identity = f"Você é {config.name}, um assistente educacional especializado em {config.subject}."
    if config.welcome_message:
        identity += f" {config.welcome_message}"
    return identity


def _knowledge_section(knowledge: Sequence[KnowledgeSnippet]) -> Optional[str]:
    if not knowledge:
        return None
    paragraphs = [f"{snippet.title}: {snippet.content}" for snippet in knowledge]
    return "CONHECIMENTO DISPONÍVEL:" + SECTION_SEPARATOR + SECTION_SEPARATOR.join(paragraphs)


def _history_section(history: Sequence[ChatTurn]) -> Optional[str]:
    if not history:
        return None
    lines = [
        f"{'Aluno' if turn.role == 'user' else 'Assistente'}: {turn.content}"
        for turn in history
    ]
    return "HISTÓRICO DA CONVERSA:\n" + "\n".join(lines)


def compose(
    config: AssistantConfig,
    knowledge: Sequence[KnowledgeSnippet] = (),
    history: Sequence[ChatTurn] = (),
    modes: Optional[ModeFlags] = None,
) -> str:
    """Build the system instruction for one chat turn.

    Sections, in order: identity, creativity tier, personality, the
    conditional blocks of CONDITIONAL_BLOCKS, the review-topic request,
    educator instructions, the knowledge corpus and the prior turns.
    Empty knowledge or history produce no section.
    """
    modes = modes or ModeFlags()

    parts: List[str] = [
        _identity(config),
        TIER_BLOCKS[select_tier(config.creativity_level)](config),
    ]

    personality = PERSONALITY_SENTENCES.get(config.personality)
    if personality:
        parts.append(personality)

    for _name, predicate, builder in CONDITIONAL_BLOCKS:
        if predicate(config, modes):
            parts.append(builder(config))

    parts.append(REVIEW_TAG_BLOCK)

    if config.instructions:
        parts.append("INSTRUÇÕES DO EDUCADOR:\n" + config.instructions)

    for section in (_knowledge_section(knowledge), _history_section(history)):
        if section:
            parts.append(section)

    return SECTION_SEPARATOR.join(parts)


def build_user_prompt(system_instruction: str, message: str) -> str:
    """Single-shot prompt sent to the model: instruction plus the new question."""
    return f"{system_instruction}{SECTION_SEPARATOR}Pergunta do estudante: {message}"
