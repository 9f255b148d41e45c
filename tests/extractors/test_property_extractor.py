import json

import pytest

from typeref.extractors.property_extractor import DecoratedPropertyExtractor
from typeref.utils.decorators import PropertyAssignment, find_decorator_by_names, has_property_key

SOURCE = """
import { ApiProperty, ApiPropertyOptional } from '@nestjs/swagger';
import * as swagger from '@nestjs/swagger';

export enum Status {
  Active = 'active',
  Inactive = 'inactive',
}

export class CreateUserDto {
  @ApiProperty({ description: 'The name', 'type': String })
  name: string;

  @ApiPropertyOptional()
  age?: number;

  @swagger.ApiProperty({ required: false, isArray })
  status?: Status;

  @IsString()
  @ApiProperty()
  email!: string;

  nickname: string;

  @Exclude
  password: string;

  constructor(private readonly service: UserService) {}

  @ApiProperty()
  getName(): string {
    return this.name;
  }
}

class Empty {}
"""


@pytest.fixture(scope="module")
def properties():
    extractor = DecoratedPropertyExtractor()
    return {p["name"]: p for p in extractor.scan_source(SOURCE, "src/dto/create-user.dto.ts")}


def test_all_fields_are_found(properties):
    assert set(properties) == {"name", "age", "status", "email", "nickname", "password"}
    assert all(p["class"] == "CreateUserDto" for p in properties.values())
    assert all(p["file_path"] == "src/dto/create-user.dto.ts" for p in properties.values())


def test_field_details(properties):
    assert properties["name"]["type_annotation"] == "string"
    assert properties["status"]["type_annotation"] == "Status"
    assert properties["age"]["optional"] is True
    assert properties["email"]["optional"] is False
    assert properties["name"]["optional"] is False
    assert properties["name"]["start_line"] < properties["age"]["start_line"]


def test_decorator_names(properties):
    assert [d.name for d in properties["name"]["decorators"]] == ["ApiProperty"]
    assert [d.name for d in properties["status"]["decorators"]] == ["ApiProperty"]
    assert [d.name for d in properties["email"]["decorators"]] == ["IsString", "ApiProperty"]
    assert [d.name for d in properties["password"]["decorators"]] == ["Exclude"]
    assert properties["nickname"]["decorators"] == []


def test_decorator_arguments(properties):
    decorator = find_decorator_by_names(["ApiProperty"], properties["name"]["decorators"])
    assert decorator.text.startswith("@ApiProperty(")
    assert [(p.name, p.value) for p in decorator.properties] == [("description", "'The name'"), ("type", "String")]
    assert has_property_key("type", decorator.properties)

    status = properties["status"]["decorators"][0]
    assert [p.name for p in status.properties] == ["required", "isArray"]
    assert properties["age"]["decorators"][0].arguments == []


def test_lookup_and_synthetic_keys(properties):
    decorators = properties["email"]["decorators"]
    assert find_decorator_by_names(["ApiProperty", "IsString"], decorators).name == "IsString"

    decorator = find_decorator_by_names(["ApiProperty"], decorators)
    assert not has_property_key("type", decorator.properties)
    decorator.properties.append(PropertyAssignment.synthesized("type", "() => String"))
    assert not has_property_key("type", decorator.properties)


def test_decorator_filter():
    extractor = DecoratedPropertyExtractor(["ApiProperty", "ApiPropertyOptional"])
    names = [p["name"] for p in extractor.scan_source(SOURCE)]
    assert names == ["name", "age", "status", "email"]


def test_process_and_write_file(tmp_path):
    source = tmp_path / "user.dto.ts"
    source.write_text(SOURCE, encoding="utf-8")
    output = tmp_path / "out" / "properties.json"
    output.parent.mkdir()

    extractor = DecoratedPropertyExtractor(["ApiProperty"])
    extractor.process_file(str(source))
    extractor.write_to_file(str(output))

    with open(output, encoding="utf-8") as f:
        data = json.load(f)
    assert [c["name"] for c in data] == ["name", "status", "email"]
    assert data[0]["decorators"][0]["properties"][1] == {"name": "type", "value": "String", "synthetic": False}
    assert len(extractor.extract_all_components()) == 3


def test_empty_decorator_names_match_nothing():
    assert DecoratedPropertyExtractor([]).scan_source(SOURCE) == []
    assert len(DecoratedPropertyExtractor(None).scan_source(SOURCE)) == 6
