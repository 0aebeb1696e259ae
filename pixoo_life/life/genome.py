"""Heritable rule sets for the evolving cellular automaton.

A genome is an immutable value: mutation and breeding always return a new
genome. Two genomes are the same lineage when their rules and hue match;
the mutation rate is carried along but does not take part in equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from numpy.random import Generator

from pixoo_life.core.config import (
    BREED_MUTATE_CHANCE,
    BREED_RATE_JITTER,
    BREEDING_CHANCE,
    CLASSIC_BIRTH_RULE,
    CLASSIC_SURVIVAL_RULE,
    HUE_MUTATION_MAX,
    INITIAL_MUTATION_RATE,
    MAX_MUTATION_RATE,
    MIN_MUTATION_RATE,
    MIN_NEIGHBORS_FOR_BREEDING,
    RATE_MUTATION_MAX,
    RULE_ADD_CHANCE,
    RULE_MUTATION_CHANCE,
)

_RULE_VALUES: tuple[int, ...] = tuple(range(1, 9))


@dataclass(frozen=True)
class Genome:
    """Birth/survival neighbour counts, display hue and mutation rate."""

    birth_rule: tuple[int, ...]
    survival_rule: tuple[int, ...]
    base_hue: float
    mutation_rate: float = field(default=INITIAL_MUTATION_RATE, compare=False)

    def __post_init__(self) -> None:
        if not self.birth_rule or not self.survival_rule:
            raise ValueError("Genome rules must not be empty")
        for rule in (self.birth_rule, self.survival_rule):
            bad = [n for n in rule if n not in _RULE_VALUES]
            if bad:
                raise ValueError(f"Rule values must be in 1..8, got {bad}")
        if not 0 <= self.base_hue < 360:
            raise ValueError(f"Hue must be in [0, 360), got {self.base_hue}")
        if not MIN_MUTATION_RATE <= self.mutation_rate <= MAX_MUTATION_RATE:
            raise ValueError(
                f"Mutation rate must be in [{MIN_MUTATION_RATE}, {MAX_MUTATION_RATE}], "
                f"got {self.mutation_rate}"
            )
        object.__setattr__(self, "birth_rule", tuple(sorted(set(self.birth_rule))))
        object.__setattr__(self, "survival_rule", tuple(sorted(set(self.survival_rule))))

    def births(self, count: int) -> bool:
        return count in self.birth_rule

    def survives(self, count: int) -> bool:
        return count in self.survival_rule

    @property
    def rule_string(self) -> str:
        """Conventional notation, e.g. ``B3/S23``."""
        birth = "".join(str(n) for n in self.birth_rule)
        survival = "".join(str(n) for n in self.survival_rule)
        return f"B{birth}/S{survival}"


def genome_equals(a: Genome, b: Genome) -> bool:
    return a == b


def create_initial_genome(hue: float) -> Genome:
    """Classic Conway rules (B3/S23) with the given hue."""
    return Genome(CLASSIC_BIRTH_RULE, CLASSIC_SURVIVAL_RULE, hue, INITIAL_MUTATION_RATE)


def _clamp_rate(rate: float) -> float:
    return max(MIN_MUTATION_RATE, min(MAX_MUTATION_RATE, rate))


def mutate_rule(rule: tuple[int, ...], rng: Generator) -> tuple[int, ...]:
    """Add an unused count or drop an existing one, never emptying the rule."""
    values = list(rule)
    if rng.random() < RULE_ADD_CHANCE and len(values) < len(_RULE_VALUES):
        unused = [n for n in _RULE_VALUES if n not in values]
        values.append(unused[int(rng.integers(len(unused)))])
    elif len(values) > 1:
        del values[int(rng.integers(len(values)))]
    return tuple(sorted(values))


def mutate_hue(hue: float, rng: Generator) -> float:
    shift = (rng.random() * 2 - 1) * HUE_MUTATION_MAX
    return (hue + shift + 360) % 360


def mutate_rate(rate: float, rng: Generator) -> float:
    shift = (rng.random() * 2 - 1) * RATE_MUTATION_MAX
    return _clamp_rate(rate + shift)


def mutate_genome(genome: Genome, rng: Generator) -> Genome:
    """Return *genome* itself most of the time, a mutated copy otherwise."""
    if rng.random() > genome.mutation_rate:
        return genome

    birth = genome.birth_rule
    if rng.random() < RULE_MUTATION_CHANCE:
        birth = mutate_rule(birth, rng)
    survival = genome.survival_rule
    if rng.random() < RULE_MUTATION_CHANCE:
        survival = mutate_rule(survival, rng)

    return Genome(
        birth_rule=birth,
        survival_rule=survival,
        base_hue=mutate_hue(genome.base_hue, rng),
        mutation_rate=mutate_rate(genome.mutation_rate, rng),
    )


def _recombine(a: tuple[int, ...], b: tuple[int, ...], rng: Generator) -> tuple[int, ...]:
    union = sorted(set(a) | set(b))
    keep = rng.random(len(union)) < 0.5
    picked = tuple(n for n, k in zip(union, keep) if k)
    if picked:
        return picked
    return (a[0],) if rng.random() < 0.5 else (b[0],)


def shortest_hue_delta(a: float, b: float) -> float:
    """Signed angle in (-180, 180] that takes hue *a* to hue *b*."""
    delta = (b - a) % 360
    if delta > 180:
        delta -= 360
    return delta


def breed_genomes(a: Genome, b: Genome, rng: Generator) -> Genome:
    """Cross two genomes. The child may be mutated straight away."""
    birth = _recombine(a.birth_rule, b.birth_rule, rng)
    survival = _recombine(a.survival_rule, b.survival_rule, rng)

    hue = (a.base_hue + shortest_hue_delta(a.base_hue, b.base_hue) * rng.random() + 360) % 360

    avg_rate = (a.mutation_rate + b.mutation_rate) / 2
    jitter = rng.random() * 2 * BREED_RATE_JITTER - BREED_RATE_JITTER

    child = Genome(
        birth_rule=birth,
        survival_rule=survival,
        base_hue=hue,
        mutation_rate=_clamp_rate(avg_rate + jitter),
    )
    if rng.random() < BREED_MUTATE_CHANCE:
        return mutate_genome(child, rng)
    return child


def should_breed(neighbor_count: int, rng: Generator) -> bool:
    """Crowded spots occasionally produce a hybrid."""
    if neighbor_count < MIN_NEIGHBORS_FOR_BREEDING:
        return False
    return rng.random() < BREEDING_CHANCE
