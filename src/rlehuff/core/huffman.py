from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from rlehuff.core.bitio import BitReader, BitWriter
from rlehuff.errors import EmptyInput, MalformedHeader

ALPHABET_SIZE = 256


# -------------------
# Strutture di base Huffman
# -------------------
@dataclass(eq=False)
class HuffmanNode:
    freq: int
    symbol: Optional[int] = None  # 0-255 per foglie, None per interni
    left: Optional["HuffmanNode"] = None
    right: Optional["HuffmanNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None and self.left is None and self.right is None


def build_freq_table(data: bytes) -> List[int]:
    freq = [0] * ALPHABET_SIZE
    for b in data:
        freq[b] += 1
    return freq


def build_huffman_tree(freq: List[int]) -> HuffmanNode:
    """
    Min-heap su (freq, seq, node).

    seq è un contatore monotono: le foglie entrano in ordine di simbolo, i nodi
    interni in ordine di creazione. A parità di frequenza vince il seq più
    basso, quindi l'albero non dipende da nessun ordine di iterazione esterno.
    """
    heap: List[Tuple[int, int, HuffmanNode]] = []
    counter = itertools.count()

    for sym, f in enumerate(freq):
        if f > 0:
            heapq.heappush(heap, (f, next(counter), HuffmanNode(freq=f, symbol=sym)))

    if not heap:
        raise EmptyInput("tabella frequenze vuota: nessun albero da costruire")

    # Caso speciale: un solo simbolo => aggiungo dummy
    if len(heap) == 1:
        only = heap[0][2]
        dummy = HuffmanNode(freq=0, symbol=(only.symbol + 1) % ALPHABET_SIZE)  # type: ignore[operator]
        heapq.heappush(heap, (0, next(counter), dummy))

    while len(heap) > 1:
        f1, _, n1 = heapq.heappop(heap)
        f2, _, n2 = heapq.heappop(heap)
        parent = HuffmanNode(freq=f1 + f2, left=n1, right=n2)
        heapq.heappush(heap, (parent.freq, next(counter), parent))

    return heap[0][2]


def build_code_table(root: HuffmanNode) -> Dict[int, str]:
    """DFS iterativa: '0' a sinistra, '1' a destra."""
    if root.is_leaf:
        raise ValueError("albero con una sola foglia: codice vuoto non ammesso")

    codes: Dict[int, str] = {}
    stack: List[Tuple[HuffmanNode, str]] = [(root, "")]
    while stack:
        node, path = stack.pop()
        if node.is_leaf:
            codes[node.symbol] = path  # type: ignore[index]
            continue
        if node.right is not None:
            stack.append((node.right, path + "1"))
        if node.left is not None:
            stack.append((node.left, path + "0"))
    return codes


# -------------------
# Header: albero in pre-order
#   nodo interno -> bit 0
#   foglia       -> bit 1 + 8 bit simbolo
# padding a zero fino al byte
# -------------------
def serialize_tree(root: HuffmanNode) -> bytes:
    w = BitWriter()
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_leaf:
            w.write_bit(1)
            w.write_bits(node.symbol, 8)  # type: ignore[arg-type]
            continue
        if node.left is None or node.right is None:
            raise ValueError("nodo interno incompleto")
        w.write_bit(0)
        stack.append(node.right)
        stack.append(node.left)
    return w.getvalue()


def deserialize_tree(blob: bytes, offset: int = 0) -> Tuple[HuffmanNode, int]:
    """Parse a serialized tree starting at ``offset``; return (root, next_offset)."""
    r = BitReader(blob[offset:])
    root: Optional[HuffmanNode] = None
    # nodi interni con almeno un figlio ancora da assegnare
    pending: List[HuffmanNode] = []
    seen: set[int] = set()
    n_internal = 0

    while True:
        if r.read_bit():
            sym = r.read_bits(8)
            if sym in seen:
                raise MalformedHeader(f"albero: simbolo duplicato {sym}")
            seen.add(sym)
            node = HuffmanNode(freq=0, symbol=sym)
        else:
            n_internal += 1
            if n_internal >= ALPHABET_SIZE:
                raise MalformedHeader("albero: troppi nodi interni")
            node = HuffmanNode(freq=0)

        if root is None:
            root = node
        else:
            parent = pending[-1]
            if parent.left is None:
                parent.left = node
            else:
                parent.right = node
                pending.pop()

        if not node.is_leaf:
            pending.append(node)
        if not pending:
            break

    if root.is_leaf:
        raise MalformedHeader("albero: la radice non può essere una foglia")
    if r.align() != 0:
        raise MalformedHeader("albero: bit di padding non nulli")
    return root, offset + r.pos // 8
