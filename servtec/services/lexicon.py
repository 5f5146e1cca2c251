"""
Keyword lexicons for message classification

Spanish (Paraguay) vocabulary as it shows up in the service group: correct
spelling, frequent misspellings, slang and chat abbreviations. Entries are
matched after lower-casing and accent folding, so accented and plain forms are
equivalent. Entries of three characters or fewer only match whole words.
"""

# Any hit marks the message as a service request
PROBLEM_KEYWORDS = [
    # Correct spelling
    "problema", "falla", "error", "no funciona", "no enciende", "roto",
    "dañado", "urgente", "ayuda", "emergencia", "crítico", "parado",
    "revisar", "importante", "necesito", "requiere", "favor", "pronto",
    "rápido", "no prende", "no arranca", "no responde", "descompuesto",

    # Common misspellings
    "problemas", "fallas", "errores", "no funca", "no ensciende", "rotto",
    "dañao", "urgentee", "urjente", "ayudaa", "emergenscia", "paradoo",
    "importantee", "nesecito", "rekiere", "fabor", "prontoo",

    # Slang
    "se jodio", "se cago", "se rompio", "no va", "no anda", "no sirve",
    "esta mal", "no camina", "muerto", "kaput", "frito", "quemado",
    "pinchado", "jodido", "cagado", "hecho mierda", "para el orto",
    "no tira", "no levanta",

    # Urgency variants
    "urgentisimo", "super urgente", "re urgente", "sos", "help", "auxilio",
    "por favor", "porfavor", "x favor",

    # Regional expressions
    "no pyta", "esta jodido", "no sirve nada", "esta para tirar", "no da mas",
    "esta hecho bolsa", "no funciona ni a palos", "esta muerto", "no hay caso",

    # Chat abbreviations
    "pls", "plz", "pliss", "urge", "urg", "emerg", "prob", "err", "ayud",
]

# Rule 1: explicit "no rush" phrasing always wins
LOW_PRIORITY_KEYWORDS = [
    "cuando puedas", "no es urgente", "sin apuro", "consulta sobre",
    "pregunta sobre", "información sobre", "cuando tengas tiempo",
    "no hay apuro", "tranquilo", "despacio", "sin prisa",

    "no es urjente", "sin apurro", "consultta", "pregunta", "informacion",
    "cuando tengas tienpo", "no ai apuro", "trankilo", "despasio",

    "nomas", "no mas", "cuando quieras", "si podes", "si tenes tiempo",
    "mas tarde", "otro dia", "mañana", "la semana que viene", "cuando sea",
    "no importa cuando",

    "queria saber", "me gustaria saber", "tengo una duda", "una pregunta",
    "consulta", "keria saber", "me gustaria saver",
]

# Rule 2: breakdown / emergency
CRITICAL_KEYWORDS = [
    "urgente", "crítico", "emergencia", "parado", "no funciona", "no enciende",
    "roto", "dañado", "inmediato", "ya",

    "urjente", "urgentee", "emergenscia", "paradoo", "no funca",
    "no ensciende", "rotto", "dañao", "inmediatoo", "yaa",

    "se jodio", "se cago", "se rompio", "muerto", "frito", "quemado", "kaput",
    "jodido", "cagado", "hecho mierda", "para el orto", "no tira",
    "no levanta", "no pyta", "esta jodido", "no sirve nada", "esta para tirar",
    "no da mas", "esta hecho bolsa", "no funciona ni a palos", "esta muerto",
    "no hay caso",

    "urgentisimo", "super urgente", "re urgente", "sos", "help", "auxilio",
    "ahora mismo", "ya mismo", "rapidisimo", "volando", "corriendo", "ahora",
    "grave", "no prende", "no arranca", "no responde", "descompuesto",
]

# Rule 3: importance / urgency claims
HIGH_PRIORITY_KEYWORDS = [
    "importante", "pronto", "rápido", "necesito", "requiere", "solicito",
    "favor", "ayuda", "error",

    "importantee", "importnte", "prontoo", "rapidoo", "nesecito", "rekiere",
    "solicitto", "fabor", "ayudaa", "ayud", "eror", "herror",

    "porfa", "porfavor", "x favor", "xfavor", "pls", "plz", "pliss", "please",
    "che ayuda", "ayudame", "ayudanos", "dale", "veni", "anda", "fijate",

    "me urge", "lo necesito", "preciso", "tengo que", "debo", "hay que",
    "no puedo", "no se puede", "imposible", "no da", "no hay forma",
]

# Rule 5: diagnostic / verification phrasing
MEDIUM_PRIORITY_KEYWORDS = [
    "falla", "revisar", "verificar", "chequear", "controlar", "mirar", "ver",

    "faya", "fallas", "chekear", "checar", "ber",

    "checkear", "testear", "probar", "evaluar", "diagnosticar",
    "inspeccionar", "chekiar", "testiar", "prover",

    "fijate", "mira", "ve", "anda a ver", "dale una mirada", "echale un ojo",
    "revisalo", "controlalo", "chequealo", "probalo",
]
