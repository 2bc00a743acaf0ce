"""
Regras anti-loop do controle remoto
===================================

Tabela declarativa de combinações (comando, parâmetros) que nunca são
executadas. Consultada pelo backend no despacho e pela TV antes de
executar, de modo que um comando bloqueado não roda em nenhuma sequência
de polling.
"""

from collections import namedtuple


BlockRule = namedtuple('BlockRule', ['command', 'params_predicate', 'reason'])


def params_missing(params):
    """Parâmetros ausentes: None ou objeto vazio"""
    return params is None or params == {}


BLOCKED_COMMANDS = (
    BlockRule(
        'play', params_missing,
        'play sem parâmetros fica como último comando e é reexecutado a cada '
        'recarga da TV, que volta a chamar play: loop de reprodução',
    ),
    BlockRule(
        'refresh', params_missing,
        'refresh recarrega a página da TV; ao voltar, a TV lê o mesmo refresh '
        'como comando novo e recarrega de novo: loop infinito de reload',
    ),
    BlockRule(
        'restart', params_missing,
        'restart sem alvo reinicia o player inteiro, que relê o restart '
        'pendente após reiniciar: loop infinito de reinício',
    ),
)


def find_block_rule(command, params):
    """Retorna a regra que bloqueia (command, params), ou None"""
    for rule in BLOCKED_COMMANDS:
        if rule.command == command and rule.params_predicate(params):
            return rule
    return None


def is_blocked(command, params) -> bool:
    return find_block_rule(command, params) is not None
