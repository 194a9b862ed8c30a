"""Improvement templates, one per friction category.

Text fields are ``str.format`` templates over ``construct`` (the
friction point's construct), ``constructs`` (comma-joined affected
constructs) and ``dsl`` (the DSL name).
"""

from __future__ import annotations

from dataclasses import dataclass

from dsladvisor.constants import TemplateName


@dataclass(frozen=True)
class ImprovementTemplate:
    name: TemplateName
    title: str
    problem: str
    solution: str
    steps: tuple[str, ...]
    criteria: tuple[str, ...]
    risks: tuple[str, ...]
    migration_strategy: str
    validation_approach: str
    rollback_plan: str
    example_before: str
    example_after: str


BREAKING_RISKS: tuple[str, ...] = (
    "User resistance to interface changes",
    "Existing call sites must be migrated before upgrading",
)

TEMPLATES: dict[TemplateName, ImprovementTemplate] = {
    TemplateName.SIMPLIFICATION: ImprovementTemplate(
        name=TemplateName.SIMPLIFICATION,
        title="Simplify the structure of {construct}",
        problem=(
            "{dsl} asks users to hold too many sections, entities or "
            "nesting levels in mind at once ({constructs})."
        ),
        solution=(
            "Group related entities behind higher-level constructs and "
            "flatten nesting so common definitions need fewer decisions."
        ),
        steps=(
            "Identify the most frequently co-declared entities in {constructs}",
            "Introduce a combined construct that covers the common case",
            "Flatten nesting deeper than the supported maximum",
            "Update guides and examples to use the simplified form",
        ),
        criteria=(
            "Cognitive complexity of {dsl} reduced by at least 20%",
            "Lines of DSL code per definition reduced by at least 15%",
            "New users complete a first definition without assistance",
        ),
        risks=(
            "Potential for introducing new bugs",
            "Documentation update requirements",
        ),
        migration_strategy=(
            "Keep the detailed form working alongside the simplified one "
            "and deprecate it over two releases."
        ),
        validation_approach=(
            "Compare cognitive complexity and definition length before and "
            "after on the same corpus."
        ),
        rollback_plan=(
            "Remove the combined construct; the detailed form still works "
            "unchanged."
        ),
        example_before="{construct} with many separately declared entities",
        example_after="{construct} declared through one combined construct",
    ),
    TemplateName.VALIDATION: ImprovementTemplate(
        name=TemplateName.VALIDATION,
        title="Add validation for {construct}",
        problem=(
            "Uses of {construct} frequently end in errors that are only "
            "found at runtime."
        ),
        solution=(
            "Validate {construct} declarations when they are defined and "
            "report actionable messages naming the offending option."
        ),
        steps=(
            "Collect the recorded error messages for {construct}",
            "Encode each recurring mistake as a definition-time check",
            "Write error messages that name the option and the expected value",
            "Add regression tests for every new check",
        ),
        criteria=(
            "Error rate for {construct} reduced by at least 20%",
            "Validation messages name the offending option and expected value",
            "No previously valid definitions are rejected by the new checks",
        ),
        risks=(
            "Stricter checks may reject definitions that relied on lax behaviour",
        ),
        migration_strategy=(
            "Ship the checks as warnings first, then promote them to errors."
        ),
        validation_approach=(
            "Track the error rate of {construct} before and after release."
        ),
        rollback_plan="Downgrade the new checks back to warnings.",
        example_before="{construct} accepted with invalid options",
        example_after="{construct} rejected at definition time with a clear message",
    ),
    TemplateName.CONCISENESS: ImprovementTemplate(
        name=TemplateName.CONCISENESS,
        title="Reduce boilerplate around {construct}",
        problem=(
            "Definitions repeat the same declarations ({constructs}) far "
            "more often than they vary."
        ),
        solution=(
            "Provide defaults or a shorthand that expresses the repeated "
            "declarations in one line."
        ),
        steps=(
            "Extract the repeated declaration sequence from the corpus",
            "Design a shorthand or default covering that sequence",
            "Implement the shorthand as sugar over the existing constructs",
            "Document when to prefer the long form",
        ),
        criteria=(
            "Lines of DSL code for typical definitions reduced by at least 25%",
            "The shorthand expands to exactly the previous declarations",
        ),
        risks=(
            "Implicit defaults can hide behaviour from readers",
        ),
        migration_strategy=(
            "Existing long-form definitions keep working; adopt the "
            "shorthand incrementally."
        ),
        validation_approach=(
            "Compare definition length and expansion equality across the corpus."
        ),
        rollback_plan="Remove the shorthand; long-form definitions are unaffected.",
        example_before="{constructs} declared one by one in every definition",
        example_after="one shorthand line expanding to {constructs}",
    ),
    TemplateName.CONSISTENCY: ImprovementTemplate(
        name=TemplateName.CONSISTENCY,
        title="Make naming consistent across {construct}",
        problem=(
            "Names used with {constructs} mix conventions, so users must "
            "remember which form each construct expects."
        ),
        solution=(
            "Adopt the dominant naming convention everywhere and accept the "
            "old spellings as deprecated aliases."
        ),
        steps=(
            "List every construct whose names deviate from the dominant convention",
            "Add aliases in the dominant convention for each deviating name",
            "Emit deprecation warnings for the old spellings",
            "Update documentation and generators to the single convention",
        ),
        criteria=(
            "Naming consistency across the corpus rises above 90%",
            "Deprecated spellings keep working for at least one release",
        ),
        risks=(
            "Potential for introducing new bugs",
            "Documentation update requirements",
        ),
        migration_strategy=(
            "Provide an automated rename for the deprecated spellings."
        ),
        validation_approach=(
            "Re-run naming analysis on the corpus after the migration window."
        ),
        rollback_plan="Keep aliases permanently and drop the deprecation warnings.",
        example_before="mixed snake_case and camelCase names across {constructs}",
        example_after="one naming convention across {constructs}",
    ),
    TemplateName.DOCUMENTATION: ImprovementTemplate(
        name=TemplateName.DOCUMENTATION,
        title="Document undocumented constructs of {construct}",
        problem=(
            "Many sections and entities of {dsl} have no documentation, so "
            "users cannot discover what they do."
        ),
        solution=(
            "Write reference documentation and examples for every "
            "undocumented section and entity."
        ),
        steps=(
            "List undocumented entities: {constructs}",
            "Write a one-paragraph description and example for each",
            "Add a documentation completeness check to the release process",
        ),
        criteria=(
            "Documentation completeness of {dsl} reaches at least 90%",
            "Every entity has at least one runnable example",
        ),
        risks=(
            "Documentation drifts when constructs change",
        ),
        migration_strategy="No migration needed; documentation is additive.",
        validation_approach="Recompute documentation completeness after release.",
        rollback_plan="Revert the documentation changes.",
        example_before="{construct} entities without descriptions",
        example_after="{construct} entities with descriptions and examples",
    ),
    TemplateName.COMPOSITION: ImprovementTemplate(
        name=TemplateName.COMPOSITION,
        title="Untangle dependencies between constructs of {construct}",
        problem=(
            "Constructs {constructs} depend on each other in ways that make "
            "them hard to combine or declare in isolation."
        ),
        solution=(
            "Break dependency cycles and introduce explicit composition "
            "points so constructs can be declared independently."
        ),
        steps=(
            "Map the dependency graph between {constructs}",
            "Break each cycle by extracting the shared part into its own construct",
            "Introduce explicit composition points for the remaining edges",
            "Add tests that declare each construct in isolation",
        ),
        criteria=(
            "No dependency cycles remain between constructs",
            "Interaction complexity reduced by at least 30%",
        ),
        risks=(
            "Potential for introducing new bugs",
            "Restructuring may change evaluation order",
        ),
        migration_strategy=(
            "Introduce the new composition points first, then move "
            "definitions over one construct at a time."
        ),
        validation_approach=(
            "Re-run dependency analysis and the full test suite."
        ),
        rollback_plan="Restore the previous dependency structure from version control.",
        example_before="{constructs} referencing each other cyclically",
        example_after="{constructs} composed through explicit extension points",
    ),
}
