import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, Tag

from .normalizer import extract_decimal, find_clock_time, parse_identity, parse_jockey, normalize_whitespace
from .sources import HorseOdds, HorseRecord
from .utils import make_soup

# Stable data-automation-id markers on the race page. Class names carry
# build-generated suffixes, so only the last-resort lookup relies on them.
DEFAULT_SELECTORS: Dict[str, str] = {
    "outcome_marker": '[data-automation-id^="racecard-outcome-"]',
    "outcome_name": '[data-automation-id="racecard-outcome-name"]',
    "outcome_generic": '[data-automation-id*="outcome"]',
    "outcome_card_class": '[class*="outcomeCard_"]',
    "jockey": '[data-automation-id="jockey-info"]',
    "fluctuations": '[data-automation-id="fluctuations"]',
    "fixed_prices": '[data-automation-id="fixed-prices"]',
    "price_row": '[data-automation-id*="price-row"]',
    "odds_button_text": "button span",
}

ContainerStrategy = Callable[[BeautifulSoup, Dict[str, str]], List[Tag]]


@dataclass(frozen=True)
class HorseFields:
    number: str
    name: str
    jockey: Optional[str]
    odds: HorseOdds


def resolve_selectors(overrides: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    selectors = dict(DEFAULT_SELECTORS)
    if overrides:
        selectors.update({k: v for k, v in overrides.items() if v})
    return selectors


# --- Container Locator ---

def _by_outcome_marker(soup: BeautifulSoup, selectors: Dict[str, str]) -> List[Tag]:
    return [
        el for el in soup.select(selectors["outcome_marker"])
        if el.select_one(selectors["outcome_name"]) is not None
    ]


def _by_generic_outcome_parent(soup: BeautifulSoup, selectors: Dict[str, str]) -> List[Tag]:
    parents: List[Tag] = []
    seen = set()
    for el in soup.select(selectors["outcome_generic"]):
        parent = el.parent
        if parent is None or parent.name == "[document]" or id(parent) in seen:
            continue
        seen.add(id(parent))
        parents.append(parent)
    return parents


def _by_outcome_card_class(soup: BeautifulSoup, selectors: Dict[str, str]) -> List[Tag]:
    return soup.select(selectors["outcome_card_class"])


CONTAINER_STRATEGIES: List[Tuple[str, ContainerStrategy]] = [
    ("outcome_marker", _by_outcome_marker),
    ("outcome_generic", _by_generic_outcome_parent),
    ("outcome_card_class", _by_outcome_card_class),
]


def locate_outcome_containers(
    soup: BeautifulSoup, selectors: Optional[Dict[str, str]] = None
) -> List[Tag]:
    """
    Runs the container strategies in order and returns the first non-empty
    hit list. An empty list means no strategy matched.
    """
    selectors = resolve_selectors(selectors)
    for name, strategy in CONTAINER_STRATEGIES:
        containers = strategy(soup, selectors)
        logging.debug(f"Container strategy '{name}' matched {len(containers)} elements.")
        if containers:
            logging.info(f"Located {len(containers)} outcome containers using '{name}'.")
            return containers
    logging.info("No outcome containers located on the page.")
    return []


# --- Field Extractor ---

def _text_children(element: Optional[Tag]) -> List[Tag]:
    if element is None:
        return []
    return [child for child in element.find_all(True, recursive=False) if child.get_text(strip=True)]


def _odds_at(values: List[Optional[str]], index: int) -> Optional[str]:
    return values[index] if index < len(values) else None


def _identity_text(container: Tag, selectors: Dict[str, str]) -> Optional[str]:
    # Class-matched cards can lack the name marker; fall back to the card itself
    name_el = next(
        (el for el in container.select(selectors["outcome_name"]) if el.get_text(strip=True)),
        container,
    )
    for candidate in name_el.find_all("span"):
        text = candidate.get_text(" ", strip=True)
        if text:
            return normalize_whitespace(text)
    return normalize_whitespace(name_el.get_text(" ", strip=True))


def _fluctuations(container: Tag, selectors: Dict[str, str]) -> List[Optional[str]]:
    flucs_el = container.select_one(selectors["fluctuations"])
    return [extract_decimal(child.get_text(strip=True)) for child in _text_children(flucs_el)]


def _fixed_prices(container: Tag, selectors: Dict[str, str]) -> List[Optional[str]]:
    prices_el = container.select_one(selectors["fixed_prices"])
    if prices_el is None:
        return []
    prices = []
    for row in prices_el.select(f":scope > {selectors['price_row']}"):
        button_text = row.select_one(selectors["odds_button_text"])
        prices.append(extract_decimal(button_text.get_text(strip=True)) if button_text else None)
    return prices


def extract_horse_fields(
    container: Tag, selectors: Optional[Dict[str, str]] = None
) -> Optional[HorseFields]:
    """
    Extracts one runner from an outcome container. Returns None when the
    "<number>. <name>" identity cannot be parsed; any other missing field
    degrades to None on the returned value.
    """
    selectors = resolve_selectors(selectors)

    identity_text = _identity_text(container, selectors)
    identity = parse_identity(identity_text)
    if identity is None:
        logging.warning(f"Skipping outcome container, unparseable identity: {identity_text!r}")
        return None
    number, name = identity

    jockey_el = container.select_one(selectors["jockey"])
    jockey = parse_jockey(jockey_el.get_text(" ", strip=True)) if jockey_el else None

    flucs = _fluctuations(container, selectors)
    fixed = _fixed_prices(container, selectors)
    odds = HorseOdds(
        open=_odds_at(flucs, 0),
        fluc1=_odds_at(flucs, 1),
        fluc2=_odds_at(flucs, 2),
        win_fixed=_odds_at(fixed, 0),
        place_fixed=_odds_at(fixed, 1),
        each_way_fixed=_odds_at(fixed, 2),
    )
    return HorseFields(number=number, name=name, jockey=jockey, odds=odds)


# --- Record Assembler ---

def parse_race_card(
    page: Union[str, BeautifulSoup], selectors: Optional[Dict[str, str]] = None
) -> List[HorseRecord]:
    """
    Parses a race page into ranked HorseRecords. Ranks count only the
    containers whose identity parsed, so they always run 1..N.
    """
    selectors = resolve_selectors(selectors)
    soup = make_soup(page)

    horses: List[HorseRecord] = []
    for container in locate_outcome_containers(soup, selectors):
        fields = extract_horse_fields(container, selectors)
        if fields is None:
            continue
        horses.append(HorseRecord(
            rank=len(horses) + 1,
            number=fields.number,
            name=fields.name,
            jockey=fields.jockey,
            odds=fields.odds,
        ))

    logging.info(f"Parsed {len(horses)} horses from race card.")
    return horses


def extract_results_time(page: Union[str, BeautifulSoup]) -> Optional[str]:
    """
    Reads the clock time from a completed race's results header, where the
    schedule page shows the finishing order instead of a time.
    """
    soup = make_soup(page)
    header = soup.select_one('div[data-automation-id="results-header"]')
    if header is None:
        return None
    for cell in header.find_all("div", recursive=False):
        found = find_clock_time(cell.get_text(" ", strip=True))
        if found:
            return found
    return None
