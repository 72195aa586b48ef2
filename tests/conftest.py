"""Shared CSV fixtures."""
from __future__ import annotations

import pytest

from storemap.data.store import DataStore

STORES_CSV = """\
store_id,address,latitude,longitude,services,centrale,gruppo,orgcedi,insegna
1,"{""street"":""Via Roma 1"",""city"":""Rome"",""province"":""RM"",""postalCode"":""00100""}",41.9028,12.4964,parking,Centrale A,Gruppo X,CEDI 1,Conad
2,"{""street"":""Corso Milano 5"",""city"":""Milan"",""province"":""MI"",""postalCode"":""20100""}",45.4642,9.19,,Centrale B,Gruppo Y,CEDI 2,Coop
3,"{""street"":"""",""city"":"""",""province"":"""",""postalCode"":""""}",44.4949,11.3426,,Centrale A,Gruppo X,CEDI 1,Conad
4,"{""city"":""Naples""}",0,14.2681,,Centrale C,Gruppo Z,CEDI 3,Despar
5,"{""city"":""Turin""}",abc,7.6869,,Centrale C,Gruppo Z,CEDI 3,Despar
2,"{""street"":""Corso Milano 7"",""city"":""Milan"",""province"":""MI"",""postalCode"":""20100""}",45.47,9.2,,Centrale B,Gruppo Y,CEDI 2,Coop
6,"{""street"":""Via Po 3"",""city"":""Florence""}",43.7696,11.2558,,,,,
"""

PRODUCTS_CSV = """\
store_id,base_price,promo_price,name,brand
12,599,null,"Apple Juice, 1L",ZueggBrand
1,249,199,Peach Nectar,Zuegg
2,299,,Peach Nectar,Zuegg
3,,,Peach Nectar,Zuegg
1,450,,Apple Juice, 1L,Zuegg
99,100,,Orphan Jam,Zuegg
2,0,,Free Sample,Zuegg
"""


@pytest.fixture
def stores_csv() -> str:
    return STORES_CSV


@pytest.fixture
def products_csv() -> str:
    return PRODUCTS_CSV


@pytest.fixture
def data_store() -> DataStore:
    return DataStore().load_text(STORES_CSV, PRODUCTS_CSV)


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "stores.csv").write_text(STORES_CSV, encoding="utf-8")
    (tmp_path / "products.csv").write_text(PRODUCTS_CSV, encoding="utf-8")
    return tmp_path
