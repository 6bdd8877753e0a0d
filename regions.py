"""
Bolivian departments and their provinces.

Campaign locations are department codes; a campaign may optionally narrow
its location to one province of that department. Province values are unique
across departments (several departments have a province called "Cercado").
"""

from typing import Dict, List, Optional, Tuple

DEPARTMENT_LABELS: Dict[str, str] = {
    "la_paz": "La Paz",
    "santa_cruz": "Santa Cruz",
    "cochabamba": "Cochabamba",
    "sucre": "Chuquisaca",
    "oruro": "Oruro",
    "potosi": "Potosí",
    "tarija": "Tarija",
    "beni": "Beni",
    "pando": "Pando",
}

DEFAULT_DEPARTMENT = "la_paz"

PROVINCES: Dict[str, List[Tuple[str, str]]] = {
    "la_paz": [
        ("murillo", "Murillo"),
        ("omasuyos", "Omasuyos"),
        ("pacajes", "Pacajes"),
        ("camacho", "Eliodoro Camacho"),
        ("munecas", "Muñecas"),
        ("larecaja", "Larecaja"),
        ("franz_tamayo", "Franz Tamayo"),
        ("ingavi", "Ingavi"),
        ("loayza", "Loayza"),
        ("inquisivi", "Inquisivi"),
        ("sud_yungas", "Sud Yungas"),
        ("los_andes", "Los Andes"),
        ("aroma", "Aroma"),
        ("nor_yungas", "Nor Yungas"),
        ("abel_iturralde", "Abel Iturralde"),
        ("bautista_saavedra", "Bautista Saavedra"),
        ("manco_kapac", "Manco Kapac"),
        ("gualberto_villarroel", "Gualberto Villarroel"),
        ("jose_manuel_pando", "José Manuel Pando"),
        ("caranavi", "Caranavi"),
    ],
    "santa_cruz": [
        ("andres_ibanez", "Andrés Ibáñez"),
        ("warnes", "Warnes"),
        ("velasco", "José Miguel de Velasco"),
        ("ichilo", "Ichilo"),
        ("chiquitos", "Chiquitos"),
        ("sara", "Sara"),
        ("cordillera", "Cordillera"),
        ("vallegrande", "Vallegrande"),
        ("florida", "Florida"),
        ("obispo_santistevan", "Obispo Santistevan"),
        ("nuflo_de_chavez", "Ñuflo de Chávez"),
        ("angel_sandoval", "Ángel Sandoval"),
        ("manuel_maria_caballero", "Manuel María Caballero"),
        ("german_busch", "Germán Busch"),
        ("guarayos", "Guarayos"),
    ],
    "cochabamba": [
        ("cercado_cochabamba", "Cercado"),
        ("campero", "Narciso Campero"),
        ("ayopaya", "Ayopaya"),
        ("esteban_arce", "Esteban Arce"),
        ("arani", "Arani"),
        ("arque", "Arque"),
        ("capinota", "Capinota"),
        ("german_jordan", "Germán Jordán"),
        ("quillacollo", "Quillacollo"),
        ("chapare", "Chapare"),
        ("tapacari", "Tapacarí"),
        ("carrasco", "Carrasco"),
        ("mizque", "Mizque"),
        ("punata", "Punata"),
        ("bolivar", "Bolívar"),
        ("tiraque", "Tiraque"),
    ],
    "sucre": [
        ("oropeza", "Oropeza"),
        ("juana_azurduy", "Juana Azurduy de Padilla"),
        ("jaime_zudanez", "Jaime Zudáñez"),
        ("tomina", "Tomina"),
        ("hernando_siles", "Hernando Siles"),
        ("yamparaez", "Yamparáez"),
        ("nor_cinti", "Nor Cinti"),
        ("sud_cinti", "Sud Cinti"),
        ("belisario_boeto", "Belisario Boeto"),
        ("luis_calvo", "Luis Calvo"),
    ],
    "oruro": [
        ("cercado_oruro", "Cercado"),
        ("abaroa", "Eduardo Avaroa"),
        ("carangas", "Carangas"),
        ("sajama", "Sajama"),
        ("litoral", "Litoral de Atacama"),
        ("poopo", "Poopó"),
        ("pantaleon_dalence", "Pantaleón Dalence"),
        ("ladislao_cabrera", "Ladislao Cabrera"),
        ("sabaya", "Sabaya"),
        ("saucari", "Saucarí"),
        ("tomas_barron", "Tomás Barrón"),
        ("sur_carangas", "Sur Carangas"),
        ("san_pedro_de_totora", "San Pedro de Totora"),
        ("sebastian_pagador", "Sebastián Pagador"),
        ("mejillones", "Mejillones"),
        ("nor_carangas", "Nor Carangas"),
    ],
    "potosi": [
        ("tomas_frias", "Tomás Frías"),
        ("rafael_bustillo", "Rafael Bustillo"),
        ("cornelio_saavedra", "Cornelio Saavedra"),
        ("chayanta", "Chayanta"),
        ("charcas", "Charcas"),
        ("nor_chichas", "Nor Chichas"),
        ("alonso_de_ibanez", "Alonso de Ibáñez"),
        ("sud_chichas", "Sud Chichas"),
        ("nor_lipez", "Nor Lípez"),
        ("sud_lipez", "Sud Lípez"),
        ("jose_maria_linares", "José María Linares"),
        ("antonio_quijarro", "Antonio Quijarro"),
        ("bernardino_bilbao", "Bernardino Bilbao"),
        ("daniel_campos", "Daniel Campos"),
        ("modesto_omiste", "Modesto Omiste"),
        ("enrique_baldivieso", "Enrique Baldivieso"),
    ],
    "tarija": [
        ("cercado_tarija", "Cercado"),
        ("aniceto_arce", "Aniceto Arce"),
        ("gran_chaco", "Gran Chaco"),
        ("jose_maria_aviles", "José María Avilés"),
        ("eustaquio_mendez", "Eustaquio Méndez"),
        ("burnet_oconnor", "Burnet O'Connor"),
    ],
    "beni": [
        ("cercado_beni", "Cercado"),
        ("vaca_diez", "Vaca Díez"),
        ("jose_ballivian", "José Ballivián"),
        ("yacuma", "Yacuma"),
        ("moxos", "Moxos"),
        ("marban", "Marbán"),
        ("mamore", "Mamoré"),
        ("itenez", "Iténez"),
    ],
    "pando": [
        ("nicolas_suarez", "Nicolás Suárez"),
        ("manuripi", "Manuripi"),
        ("madre_de_dios", "Madre de Dios"),
        ("abuna", "Abuná"),
        ("federico_roman", "Federico Román"),
    ],
}


def is_department(code: Optional[str]) -> bool:
    return code in DEPARTMENT_LABELS


def is_province_in_department(province: Optional[str], department: Optional[str]) -> bool:
    if not province:
        return False
    return any(value == province for value, _ in PROVINCES.get(department or "", []))
