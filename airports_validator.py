'''
Airport seed validator.
Run this to check the integrity of airports.json before shipping it.
'''
import json
from pathlib import Path


REQUIRED_FIELDS = ['id', 'iata', 'name']


def validate_airports(file_path: str = 'airports.json') -> bool:
    '''Validate the airports dataset.'''
    print(f"Validating {file_path}...")

    if not Path(file_path).exists():
        print(f"❌ Error: {file_path} not found")
        return False

    with open(file_path, 'r', encoding='utf-8') as f:
        try:
            airports = json.load(f)
        except json.JSONDecodeError as e:
            print(f"❌ Invalid JSON: {e}")
            return False

    if not isinstance(airports, list):
        print("❌ Error: Root element must be a list")
        return False

    errors = []
    warnings = []
    iata_codes = set()
    ids = set()

    for idx, airport in enumerate(airports):
        if not isinstance(airport, dict):
            errors.append(f"Airport {idx}: Not a dictionary")
            continue

        for field in REQUIRED_FIELDS:
            if field not in airport:
                errors.append(f"Airport {idx}: Missing required field '{field}'")

        iata = airport.get('iata', '')
        if iata:
            if len(iata) != 3:
                errors.append(f"Airport {idx} ({iata}): IATA code must be 3 characters")
            elif not iata.isupper():
                warnings.append(f"Airport {idx} ({iata}): IATA code should be uppercase")

            if iata.upper() in iata_codes:
                errors.append(f"Airport {idx} ({iata}): Duplicate IATA code")
            else:
                iata_codes.add(iata.upper())

        airport_id = airport.get('id')
        if airport_id is not None:
            if not isinstance(airport_id, int):
                errors.append(f"Airport {idx} ({iata}): id must be an integer")
            elif airport_id in ids:
                errors.append(f"Airport {idx} ({iata}): Duplicate id {airport_id}")
            else:
                ids.add(airport_id)

        if 'name' in airport and not str(airport.get('name') or '').strip():
            warnings.append(f"Airport {idx} ({iata}): Empty name")

        passengers = airport.get('passengers', 0)
        if not isinstance(passengers, int) or passengers < 0:
            errors.append(f"Airport {idx} ({iata}): passengers must be a non-negative integer")

    print(f"\n📊 Statistics:")
    print(f"   Total airports: {len(airports)}")
    print(f"   Unique IATA codes: {len(iata_codes)}")

    if errors:
        print(f"\n❌ Found {len(errors)} errors:")
        for error in errors[:20]:
            print(f"   - {error}")
        if len(errors) > 20:
            print(f"   ... and {len(errors) - 20} more")
        return False

    if warnings:
        print(f"\n⚠️  Found {len(warnings)} warnings:")
        for warning in warnings[:10]:
            print(f"   - {warning}")
        if len(warnings) > 10:
            print(f"   ... and {len(warnings) - 10} more")

    print("\n✅ Validation passed!")
    return True


def sort_airports(file_path: str = 'airports.json'):
    '''Sort airports by id so catalog order is stable.'''
    print(f"\nSorting {file_path}...")

    with open(file_path, 'r', encoding='utf-8') as f:
        airports = json.load(f)

    airports.sort(key=lambda a: (a.get('id', 0), a.get('iata', '')))

    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(airports, f, indent=2, ensure_ascii=False)

    print("✅ Airports sorted and saved")


if __name__ == '__main__':
    import sys

    file_path = sys.argv[1] if len(sys.argv) > 1 else 'airports.json'

    if validate_airports(file_path):
        response = input("\nSort airports by id? (y/n): ")
        if response.lower() == 'y':
            sort_airports(file_path)
    else:
        print("\n⚠️  Please fix errors before proceeding")
        sys.exit(1)
