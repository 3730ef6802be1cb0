"""Test configuration and fixtures."""

import pytest
from lxml import etree

from src.import_.measure.generic_importer import MeasureImporter

# Sample HITSP C32 content for testing
SAMPLE_C32 = """<?xml version="1.0" encoding="UTF-8"?>
<ClinicalDocument xmlns="urn:hl7-org:v3">
  <templateId root="2.16.840.1.113883.10.20.1"/>
  <templateId root="2.16.840.1.113883.3.88.11.32.1"/>
  <recordTarget>
    <patientRole>
      <patient>
        <name>
          <given>John</given>
          <family>Test</family>
        </name>
      </patient>
    </patientRole>
  </recordTarget>
  <component>
    <structuredBody>
      <component>
        <section>
          <templateId root="2.16.840.1.113883.3.88.11.83.127"/>
          <title>Encounters</title>
          <entry>
            <encounter classCode="ENC" moodCode="EVN">
              <id root="enc-1"/>
              <code code="99201" codeSystem="2.16.840.1.113883.6.12" displayName="Office Visit"/>
              <effectiveTime value="20100315"/>
            </encounter>
          </entry>
        </section>
      </component>
      <component>
        <section>
          <templateId root="2.16.840.1.113883.10.20.1.12"/>
          <title>Procedures</title>
          <entry>
            <procedure classCode="PROC" moodCode="EVN">
              <templateId root="2.16.840.1.113883.10.20.1.29"/>
              <id root="proc-1" extension="A1"/>
              <code code="73761001" codeSystem="2.16.840.1.113883.6.96">
                <originalText>Colonoscopy</originalText>
                <translation code="45378" codeSystem="2.16.840.1.113883.6.12"/>
              </code>
              <statusCode code="completed"/>
              <effectiveTime>
                <low value="20100401093000"/>
                <high value="20100401103000"/>
              </effectiveTime>
            </procedure>
          </entry>
        </section>
      </component>
      <component>
        <section>
          <templateId root="2.16.840.1.113883.10.20.1.14"/>
          <title>Results</title>
          <entry>
            <organizer classCode="BATTERY" moodCode="EVN">
              <component>
                <observation classCode="OBS" moodCode="EVN">
                  <templateId root="2.16.840.1.113883.3.88.11.83.15"/>
                  <id root="result-1"/>
                  <code code="2345-7" codeSystem="2.16.840.1.113883.6.1" displayName="Glucose"/>
                  <statusCode code="completed"/>
                  <effectiveTime value="20100601"/>
                  <value value="98" unit="mg/dL"/>
                </observation>
              </component>
            </organizer>
          </entry>
        </section>
      </component>
      <component>
        <section>
          <templateId root="2.16.840.1.113883.10.20.1.16"/>
          <title>Vital Signs</title>
          <entry>
            <organizer classCode="CLUSTER" moodCode="EVN">
              <component>
                <observation classCode="OBS" moodCode="EVN">
                  <templateId root="2.16.840.1.113883.3.88.11.83.14"/>
                  <id root="vital-1"/>
                  <code code="8480-6" codeSystem="2.16.840.1.113883.6.1" displayName="Systolic BP"/>
                  <effectiveTime value="20100315"/>
                  <value value="132" unit="mm[Hg]"/>
                </observation>
              </component>
            </organizer>
          </entry>
        </section>
      </component>
      <component>
        <section>
          <templateId root="2.16.840.1.113883.3.88.11.83.112"/>
          <title>Medications</title>
          <entry>
            <substanceAdministration classCode="SBADM" moodCode="EVN">
              <id root="med-1"/>
              <effectiveTime>
                <low value="20100101"/>
                <high nullFlavor="UNK"/>
              </effectiveTime>
              <consumable>
                <manufacturedProduct>
                  <manufacturedMaterial>
                    <code code="197361" codeSystem="2.16.840.1.113883.6.88" displayName="Amlodipine 5 MG"/>
                  </manufacturedMaterial>
                </manufacturedProduct>
              </consumable>
            </substanceAdministration>
          </entry>
        </section>
      </component>
      <component>
        <section>
          <templateId root="2.16.840.1.113883.3.88.11.83.103"/>
          <title>Problems</title>
          <entry>
            <act classCode="ACT" moodCode="EVN">
              <entryRelationship typeCode="SUBJ">
                <observation classCode="OBS" moodCode="EVN">
                  <id root="cond-1"/>
                  <code code="64572001" codeSystem="2.16.840.1.113883.6.96" displayName="Condition"/>
                  <effectiveTime>
                    <low value="20080510"/>
                  </effectiveTime>
                  <value code="44054006" codeSystem="2.16.840.1.113883.6.96" displayName="Diabetes mellitus type 2"/>
                </observation>
              </entryRelationship>
            </act>
          </entry>
          <entry>
            <act classCode="ACT" moodCode="EVN">
              <entryRelationship typeCode="SUBJ">
                <observation classCode="OBS" moodCode="EVN">
                  <id root="cond-2"/>
                  <code code="64572001" codeSystem="2.16.840.1.113883.6.96" displayName="Condition"/>
                  <effectiveTime>
                    <low value="20090120"/>
                  </effectiveTime>
                  <value code="38341003" codeSystem="2.16.840.1.113883.6.96" displayName="Hypertension"/>
                </observation>
              </entryRelationship>
            </act>
          </entry>
        </section>
      </component>
    </structuredBody>
  </component>
</ClinicalDocument>"""


@pytest.fixture
def sample_c32() -> str:
    """Sample C32 document for testing."""
    return SAMPLE_C32


@pytest.fixture
def c32_document(sample_c32: str) -> etree._ElementTree:
    """Sample C32 document parsed with lxml."""
    return etree.ElementTree(etree.fromstring(sample_c32.encode("utf-8")))


@pytest.fixture
def importer() -> MeasureImporter:
    """Measure importer with the C32 location queries."""
    return MeasureImporter(strict_categories=False)
