#!/usr/bin/env python3
"""
Example usage of the rule110 package.
"""

from rule110 import Automaton, BitField, SeedLibrary, render


def main():
    """Demonstrate programmatic usage of the rule110 package."""
    # 40 cells packed into 16-bit blocks
    field = BitField(40, block_width=16)
    automaton = Automaton(field)

    library = SeedLibrary()
    single = library.get_seed("Single")

    if single:
        single.apply_to_field(field)

        def show(generation, row):
            print(f"{generation:3d} |{render(row)}|")

        automaton.run(20, show)

    # Show statistics
    stats = automaton.get_statistics()
    print("Final statistics:")
    for key, value in stats.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
