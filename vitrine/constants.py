STOPWORDS = {
    "para", "pro", "pra", "com", "sem", "e", "ou",
    "da", "do", "de", "a", "o", "os", "as", "um", "uma",
    "no", "na", "nos", "nas", "por", "favor", "pf", "isso",
    "quero", "queria", "preciso", "gostaria", "me", "manda",
    "sim", "ok", "beleza", "certo", "ver", "mostra", "mostrar",
    "tem", "voces", "vcs", "vc", "ai", "algum", "alguma",
    "tambem", "tb", "qual", "quais", "seus", "suas",
}

# Tudo aqui ja esta normalizado (sem acento, minusculo)
GREETINGS = {
    "oi", "oie", "ola", "ei", "eai", "e ai", "opa", "hey", "hi", "hello",
    "bom dia", "boa tarde", "boa noite", "tudo bem", "tudo bom",
}

# Palavras que podem vir depois da saudacao sem virar pedido ("oi tudo bem", "bom dia moca")
GREETING_FILLERS = {
    "tudo", "bem", "bom", "blz", "beleza", "td", "tranquilo", "ai", "la",
    "moca", "moco", "amigo", "amiga", "pessoal", "gente", "galera",
}

MENU_SHORTCUTS = {
    "1": "LIST_CATEGORIES",
    "2": "STORE_INFO",
    "3": "TALK_TO_HUMAN",
}

# Frases exatas (apos normalizacao) que pedem o menu de categorias
CATEGORY_MENU_PHRASES = {
    "menu", "categorias", "quais categorias", "quais as categorias",
    "catalogo", "ver catalogo", "o que voces tem", "o que vcs tem",
    "o que voces vendem", "tem produtos", "quais produtos voces tem",
}

HUMAN_KEYWORDS = [
    "atendente", "humano", "falar com alguem", "falar com uma pessoa",
    "falar com pessoa", "pessoa real", "falar com vendedor",
]
ADDRESS_KEYWORDS = ["endereco", "onde fica", "onde voces ficam", "localizacao"]
HOURS_KEYWORDS = ["horario", "que horas abre", "que horas fecha", "funcionamento", "abre hoje"]
# Frases compostas: "pagamento" sozinho pode ser nome de produto
PAYMENT_KEYWORDS = [
    "forma de pagamento", "formas de pagamento", "aceita pix", "aceitam pix",
    "aceita cartao", "aceitam cartao", "como pagar", "como pago", "pagar com",
]

HANDOFF_ACK = "👤 Um atendente humano entrará em contato em breve."
HANDOFF_IN_PROGRESS = "Um atendente humano está em andamento. Aguarde contato."
GENERIC_APOLOGY = "Tive um problema técnico 😕\nQuer falar com um atendente?"
GENERATION_FAILURE = (
    "Desculpe, não consegui responder sobre esse produto agora 😕\n"
    "Se preferir, diga *atendente* que eu chamo alguém da equipe."
)
NO_PRODUCTS = "No momento não temos produtos cadastrados."
MENU_HINT = "Se preferir: 1) ver categorias 2) endereço e horário 3) falar com atendente"
